"""Pytest fixtures for the Quroosh zakat service tests."""
import random
from datetime import datetime, timezone

import pytest

from quroosh import create_app
from quroosh.services.cache import QuoteCache
from quroosh.services.gold_price import GoldPriceResolver
from quroosh.services.time_provider import TimeProvider
from tests.fakes.fake_sources import FakeGoldSource


# Fixed "now" for deterministic tests
FROZEN_NOW = datetime(2026, 1, 15, tzinfo=timezone.utc)

# 80 USD/g * 3.75 = 300 SAR/g
FAKE_USD_PER_GRAM = 80.0


@pytest.fixture
def frozen_time():
    """Fixture that freezes time to FROZEN_NOW (2026-01-15T00:00Z).

    Yields the TimeProvider for use in tests. Automatically resets
    the default TimeProvider after the test completes.
    """
    provider = TimeProvider(frozen_at=FROZEN_NOW)
    TimeProvider.set_default(provider)
    yield provider
    TimeProvider.reset_default()


@pytest.fixture
def frozen_now():
    """Returns the frozen instant for assertions."""
    return FROZEN_NOW


@pytest.fixture
def fake_source():
    return FakeGoldSource(prices=[FAKE_USD_PER_GRAM], name='fake-live')


@pytest.fixture
def make_resolver(frozen_time):
    """Factory for resolvers wired to fakes, a frozen clock and no manual override."""
    def _make(current_sources=None, historical_sources=None, manual_price=None, **kwargs):
        kwargs.setdefault('cache_seconds', 600)
        kwargs.setdefault('usd_to_local_rate', 3.75)
        kwargs.setdefault('currency', 'SAR')
        kwargs.setdefault('rng', random.Random(42))
        return GoldPriceResolver(
            current_sources=current_sources or [],
            historical_sources=historical_sources or [],
            cache=kwargs.pop('cache', QuoteCache()),
            time_provider=frozen_time,
            manual_price=lambda: manual_price,
            **kwargs,
        )
    return _make


@pytest.fixture
def resolver(make_resolver, fake_source):
    return make_resolver(current_sources=[fake_source], historical_sources=[fake_source])


@pytest.fixture
def app(tmp_path, resolver):
    """Create application for testing.

    Yields:
        Flask application with a temporary investment store and a resolver
        backed by fake sources.
    """
    app = create_app({
        'TESTING': True,
        'DATA_DIR': str(tmp_path),
        'GOLD_PRICE_RESOLVER': resolver,
    })
    yield app


@pytest.fixture
def client(app):
    """Create test client.

    Yields:
        Flask test client for making requests.
    """
    with app.test_client() as client:
        yield client
