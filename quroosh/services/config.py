"""Configuration service for gold pricing and app settings."""
import math
import os

from quroosh.constants import (
    DEFAULT_GOLD_CACHE_SECONDS,
    DEFAULT_PROVIDER_TIMEOUT_SECONDS,
    DEFAULT_REPORTING_CURRENCY,
    DEFAULT_USD_TO_LOCAL_RATE,
)


def get_manual_gold_price() -> float | None:
    """Get the operator-configured gold price per gram, if any.

    Controlled by GOLD_PRICE_PER_GRAM (reporting currency). Non-numeric or
    non-positive values are treated as unset.
    """
    raw = os.environ.get('GOLD_PRICE_PER_GRAM')
    if not raw:
        return None
    try:
        value = float(raw)
    except ValueError:
        return None
    if not math.isfinite(value) or value <= 0:
        return None
    return value


def is_live_provider_enabled() -> bool:
    """Check if the keyless live market-data provider may be queried.

    Controlled by GOLD_LIVE_PROVIDER_ENABLED env var (default: 1/true).
    """
    return os.environ.get('GOLD_LIVE_PROVIDER_ENABLED', '1').lower() in ('1', 'true', 'yes')


def get_goldapi_key() -> str | None:
    """Get GoldAPI key if configured."""
    return os.environ.get('GOLD_API_KEY')


def get_goldapi_base_url() -> str:
    return os.environ.get('GOLD_API_BASE_URL', 'https://www.goldapi.io/api')


def get_cache_seconds() -> int:
    """Get the gold price freshness window in seconds.

    Controlled by GOLD_PRICE_CACHE_SECONDS env var (default: 600 = 10 minutes).
    """
    return int(os.environ.get('GOLD_PRICE_CACHE_SECONDS', str(DEFAULT_GOLD_CACHE_SECONDS)))


def get_provider_timeout() -> float:
    """Get the per-request timeout for gold price providers in seconds."""
    return float(os.environ.get('GOLD_PROVIDER_TIMEOUT_SECONDS', str(DEFAULT_PROVIDER_TIMEOUT_SECONDS)))


def get_usd_to_local_rate() -> float:
    """Get the fixed USD -> reporting currency multiplier (default: 3.75 for SAR)."""
    return float(os.environ.get('GOLD_USD_TO_LOCAL_RATE', str(DEFAULT_USD_TO_LOCAL_RATE)))


def get_reporting_currency() -> str:
    return os.environ.get('REPORTING_CURRENCY', DEFAULT_REPORTING_CURRENCY).upper()


def get_user_agent() -> str:
    """Get the User-Agent string for provider HTTP requests."""
    default_ua = 'QurooshZakat/1.0'
    return os.environ.get('PRICING_SYNC_USER_AGENT', default_ua)


def get_pricing_config() -> dict:
    """Get complete gold pricing configuration status."""
    return {
        'manual_override': get_manual_gold_price() is not None,
        'live_provider_enabled': is_live_provider_enabled(),
        'goldapi_configured': bool(get_goldapi_key()),
        'cache_seconds': get_cache_seconds(),
        'provider_timeout_seconds': get_provider_timeout(),
        'usd_to_local_rate': get_usd_to_local_rate(),
        'reporting_currency': get_reporting_currency(),
    }
