"""Provider registry and selection logic."""
from quroosh.services.config import get_goldapi_key, is_live_provider_enabled
from . import GoldSource, HistoricalGoldSource
from .gold_providers import GoldAPIProvider, YahooFinanceGoldProvider


def get_current_sources() -> list[GoldSource]:
    """Get the ordered list of live gold price sources.

    Priority:
    1. Yahoo Finance (no key) - primary live market data
    2. GoldAPI (if key configured) - secondary priced API
    """
    sources: list[GoldSource] = []
    if is_live_provider_enabled():
        sources.append(YahooFinanceGoldProvider())
    if get_goldapi_key():
        sources.append(GoldAPIProvider())
    return sources


def get_historical_sources() -> list[HistoricalGoldSource]:
    """Get the ordered list of historical gold price sources.

    Priority:
    1. Yahoo Finance daily closes, nearest within +/-3 days
    2. GoldAPI by exact date (if key configured)
    """
    sources: list[HistoricalGoldSource] = []
    if is_live_provider_enabled():
        sources.append(YahooFinanceGoldProvider())
    if get_goldapi_key():
        sources.append(GoldAPIProvider())
    return sources


def get_provider_status() -> dict:
    """Return status of all configured gold price sources."""
    return {
        'current': [
            {
                'provider': source.name,
                'requires_key': source.requires_api_key,
                'configured': source.is_configured(),
            }
            for source in get_current_sources()
        ],
        'historical': [
            {
                'provider': source.name,
                'configured': source.is_configured(),
            }
            for source in get_historical_sources()
        ],
    }
