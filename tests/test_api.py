"""Tests for the zakat and gold price API endpoints."""
import pytest

from quroosh.db import get_db
from quroosh.services.investments import add_investment, parse_investment
from tests.fakes.fake_sources import FailingGoldSource


def _post_calculate(client, body):
    return client.post('/api/v1/zakat/calculate', json=body)


# ============================================================
# POST /api/v1/zakat/calculate
# ============================================================

def test_calculate_inline_investments(client):
    """Inline investments are calculated against the resolved gold price (300 SAR/g)."""
    response = _post_calculate(client, {'investments': [
        {'name': 'Bitcoin', 'category': 'Crypto', 'amount_owned': 1, 'current_price': 40000},
        {'name': 'Villa', 'category': 'Real Estate', 'amount_owned': 1, 'current_price': 100000},
    ]})

    assert response.status_code == 200
    data = response.get_json()
    assert data['success'] is True

    calculation = data['calculation']
    assert calculation['current_gold_price_per_gram'] == 300.0
    assert calculation['gold_nisab_value'] == 25500.0
    assert calculation['meets_nisab'] is True
    assert calculation['total_zakat'] == pytest.approx(3500.0)
    assert calculation['nisab_gated_zakat'] == pytest.approx(3500.0)
    assert calculation['currency'] == 'SAR'
    assert calculation['gold_price_source'] == 'live'
    assert calculation['timestamp'] == '2026-01-15T00:00:00+00:00'


def test_calculate_breakdown_keys(client):
    response = _post_calculate(client, {'investments': [
        {'name': 'Bars', 'category': 'Gold', 'amount_owned': 10, 'current_price': 300},
    ]})

    calculation = response.get_json()['calculation']
    assert set(calculation['category_breakdown']) == {'real_estate', 'stocks', 'crypto', 'gold'}
    assert calculation['category_breakdown']['gold']['items'][0]['weight'] == 10


def test_calculate_camel_case_fields(client):
    response = _post_calculate(client, {'investments': [
        {'name': 'Saudi Aramco', 'category': 'Stock', 'amountOwned': 100, 'currentPrice': 30,
         'purchaseDate': '2025-12-01'},
    ]})

    stocks = response.get_json()['calculation']['category_breakdown']['stocks']
    assert stocks['zakatable'] == 3000
    assert stocks['items'][0]['reason'].startswith('Saudi stock - Speculator')


def test_calculate_from_stored_portfolio(app, client):
    with app.app_context():
        db = get_db()
        add_investment(db, 'user-1', parse_investment({
            'name': 'Tadawul Bank', 'category': 'Stock', 'amount_owned': 100,
            'current_price': 50, 'purchase_date': '2024-06-01',
        }))
        add_investment(db, 'user-1', parse_investment({
            'name': 'Bars', 'category': 'Gold', 'amount_owned': 10, 'current_price': 300,
        }))
        db.commit()

    response = _post_calculate(client, {'portfolio_id': 'user-1'})

    assert response.status_code == 200
    calculation = response.get_json()['calculation']
    assert calculation['category_breakdown']['stocks']['total'] == 5000
    assert calculation['category_breakdown']['stocks']['zakatable'] == 0
    assert calculation['total_liquid_assets'] == 3000
    assert calculation['meets_nisab'] is False
    assert calculation['total_zakat'] == 0


def test_calculate_empty_portfolio_returns_400(client):
    response = _post_calculate(client, {'portfolio_id': 'nobody'})

    assert response.status_code == 400
    assert response.get_json() == {
        'success': False,
        'error': 'No investments found. Add investments to calculate Zakat.',
    }


def test_calculate_empty_investment_list_returns_400(client):
    response = _post_calculate(client, {'investments': []})
    assert response.status_code == 400


def test_calculate_missing_body_returns_400(client):
    response = client.post('/api/v1/zakat/calculate')
    assert response.status_code == 400
    assert response.get_json()['success'] is False


def test_calculate_investments_not_a_list(client):
    response = _post_calculate(client, {'investments': {'name': 'Bitcoin'}})
    assert response.status_code == 400


def test_calculate_invalid_record_returns_400(client):
    response = _post_calculate(client, {'investments': [
        {'name': 'Bitcoin', 'category': 'Crypto', 'amount_owned': -1, 'current_price': 40000},
    ]})

    assert response.status_code == 400
    assert 'amount_owned' in response.get_json()['error']


def test_calculate_survives_provider_outage(app, client, make_resolver):
    """With every source down the fallback price still yields a result."""
    app.extensions['gold_price_resolver'] = make_resolver(current_sources=[FailingGoldSource()])

    response = _post_calculate(client, {'investments': [
        {'name': 'Bitcoin', 'category': 'Crypto', 'amount_owned': 1, 'current_price': 40000},
    ]})

    assert response.status_code == 200
    assert response.get_json()['calculation']['gold_price_source'] == 'fallback'


# ============================================================
# GET /api/v1/zakat/gold-price
# ============================================================

def test_gold_price(client):
    response = client.get('/api/v1/zakat/gold-price')

    assert response.status_code == 200
    gold = response.get_json()['gold_price']
    assert gold['price_per_gram'] == 300.0
    assert gold['nisab_value'] == 25500.0
    assert gold['nisab_grams'] == 85
    assert gold['currency'] == 'SAR'
    assert gold['source'] == 'live'
    assert gold['provider'] == 'fake-live'
    assert gold['as_of'] == '2026-01-15T00:00:00+00:00'


def test_gold_price_second_call_is_cached(client, fake_source):
    client.get('/api/v1/zakat/gold-price')
    response = client.get('/api/v1/zakat/gold-price')

    assert response.get_json()['gold_price']['source'] == 'cached'
    assert fake_source.current_calls == 1


# ============================================================
# POST /api/v1/gold/prices
# ============================================================

def test_gold_prices_estimates_past_price(client):
    """The fake source has no history, so the price is back-estimated from 300."""
    response = client.post('/api/v1/gold/prices', json={'purchase_date': '2025-01-15'})

    assert response.status_code == 200
    prices = response.get_json()['prices']
    assert prices['current_price'] == 300.0
    assert prices['purchase_price'] == pytest.approx(300.0 / 1.08, abs=0.05)
    assert prices['purchase_date'] == '2025-01-15'
    assert prices['currency'] == 'SAR'
    assert prices['unit'] == 'gram'


def test_gold_prices_accepts_camel_case(client):
    response = client.post('/api/v1/gold/prices', json={'purchaseDate': '2025-01-15'})
    assert response.status_code == 200


def test_gold_prices_requires_purchase_date(client):
    response = client.post('/api/v1/gold/prices', json={})

    assert response.status_code == 400
    assert response.get_json() == {'success': False, 'error': 'Purchase date is required'}


def test_gold_prices_invalid_date(client):
    response = client.post('/api/v1/gold/prices', json={'purchase_date': 'not-a-date'})

    assert response.status_code == 400
    assert response.get_json()['success'] is False


# ============================================================
# GET /api/v1/gold/providers
# ============================================================

def test_gold_providers_lists_sources_in_order(client, monkeypatch):
    monkeypatch.setenv('GOLD_API_KEY', 'test-key')
    monkeypatch.delenv('GOLD_LIVE_PROVIDER_ENABLED', raising=False)

    response = client.get('/api/v1/gold/providers')

    assert response.status_code == 200
    data = response.get_json()
    assert [p['provider'] for p in data['providers']['current']] == ['yahoo-finance', 'goldapi']
    assert [p['provider'] for p in data['providers']['historical']] == ['yahoo-finance', 'goldapi']
    assert data['config']['goldapi_configured'] is True
    assert data['config']['reporting_currency'] == 'SAR'


def test_gold_providers_without_key(client, monkeypatch):
    monkeypatch.delenv('GOLD_API_KEY', raising=False)
    monkeypatch.setenv('GOLD_LIVE_PROVIDER_ENABLED', '0')

    data = client.get('/api/v1/gold/providers').get_json()

    assert data['providers'] == {'current': [], 'historical': []}
    assert data['config']['live_provider_enabled'] is False
