"""API routes for zakat calculation and gold pricing."""
from flask import Blueprint, jsonify, request, current_app

from quroosh import get_gold_price_resolver
from quroosh.constants import NISAB_GOLD_GRAMS
from quroosh.db import get_db
from quroosh.errors import InvalidInputError
from quroosh.services.config import get_pricing_config
from quroosh.services.investments import get_portfolio, parse_investments
from quroosh.services.providers.registry import get_provider_status
from quroosh.services.time_provider import parse_date
from quroosh.services.zakat import calculate_zakat, gold_nisab_value
from quroosh.services.fx import round_half_up

api_bp = Blueprint('api', __name__)


@api_bp.errorhandler(InvalidInputError)
def _invalid_input(e):
    return jsonify({'success': False, 'error': str(e)}), 400


@api_bp.errorhandler(500)
def _server_error(e):
    # Flask has already logged the original exception
    return jsonify({'success': False, 'error': 'Internal server error'}), 500


@api_bp.route('/zakat/calculate', methods=['POST'])
def calculate():
    """Calculate zakat for an investment portfolio.

    Request body (one of):
    {
        "investments": [
            {"name": "Tadawul Bank", "category": "Stock", "amount_owned": 100,
             "current_price": 50, "purchase_date": "2025-01-01"},
            ...
        ]
    }
    {
        "portfolio_id": "user-42"
    }

    Returns:
        {"success": true, "calculation": {...}} or 400 when the portfolio is
        empty or a record is invalid.
    """
    body = request.get_json(silent=True) or {}

    if 'investments' in body:
        items = body['investments']
        if not isinstance(items, list):
            return jsonify({'success': False, 'error': 'investments must be a list'}), 400
        investments = parse_investments(items)
    elif body.get('portfolio_id'):
        investments = get_portfolio(get_db(), str(body['portfolio_id']))
    else:
        return jsonify({'success': False, 'error': 'investments or portfolio_id is required'}), 400

    if not investments:
        return jsonify({
            'success': False,
            'error': 'No investments found. Add investments to calculate Zakat.'
        }), 400

    quote = get_gold_price_resolver().get_current_price()
    calculation = calculate_zakat(investments, quote.price_per_gram)
    calculation['currency'] = quote.currency
    calculation['gold_price_source'] = quote.source

    current_app.logger.info(
        f"Zakat calculation: {len(investments)} investments, "
        f"{calculation['skipped_items']} skipped, meets_nisab={calculation['meets_nisab']}"
    )

    return jsonify({'success': True, 'calculation': calculation})


@api_bp.route('/zakat/gold-price')
def gold_price():
    """Return the current gold price per gram and the derived Nisab value."""
    quote = get_gold_price_resolver().get_current_price()
    return jsonify({
        'success': True,
        'gold_price': {
            'price_per_gram': quote.price_per_gram,
            'nisab_value': round_half_up(gold_nisab_value(quote.price_per_gram)),
            'nisab_grams': NISAB_GOLD_GRAMS,
            'currency': quote.currency,
            'source': quote.source,
            'provider': quote.provider,
            'as_of': quote.as_of.isoformat(),
        }
    })


@api_bp.route('/gold/prices', methods=['POST'])
def gold_prices():
    """Return the gold price at a purchase date alongside today's price.

    Request body:
    {
        "purchase_date": "2024-03-01"
    }
    """
    body = request.get_json(silent=True) or {}

    purchase_date_str = body.get('purchase_date', body.get('purchaseDate'))
    if not purchase_date_str:
        return jsonify({'success': False, 'error': 'Purchase date is required'}), 400

    purchase_date = parse_date(purchase_date_str)

    resolver = get_gold_price_resolver()
    quote = resolver.get_current_price()
    historical = resolver.get_historical_price(purchase_date, quote.price_per_gram)

    return jsonify({
        'success': True,
        'prices': {
            'purchase_price': historical,
            'current_price': quote.price_per_gram,
            'purchase_date': purchase_date.isoformat(),
            'currency': quote.currency,
            'unit': 'gram',
        }
    })


@api_bp.route('/gold/providers')
def gold_providers():
    """Return configured gold price sources and pricing configuration."""
    return jsonify({
        'providers': get_provider_status(),
        'config': get_pricing_config(),
    })
