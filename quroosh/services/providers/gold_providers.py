"""Gold price provider implementations."""
import json
import urllib.request
import urllib.error
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional

from quroosh.constants import GRAMS_PER_TROY_OUNCE, HISTORICAL_WINDOW_DAYS
from quroosh.services.config import (
    get_goldapi_base_url,
    get_goldapi_key,
    get_provider_timeout,
    get_user_agent,
)
from . import (
    GoldSource,
    HistoricalGoldSource,
    PricePoint,
    ProviderError,
    RateLimitError,
    AuthenticationError,
    NetworkError,
    NoDataError,
    pick_nearest,
)


def _get_json(url: str, headers: dict, timeout: float) -> dict:
    """GET a JSON document, translating transport failures into ProviderError."""
    try:
        req = urllib.request.Request(url, headers={'User-Agent': get_user_agent(), **headers})
        with urllib.request.urlopen(req, timeout=timeout) as response:
            return json.loads(response.read().decode('utf-8'))
    except urllib.error.HTTPError as e:
        if e.code == 429:
            raise RateLimitError("Rate limit exceeded")
        if e.code in (401, 403):
            raise AuthenticationError(f"Rejected credentials (HTTP {e.code})")
        raise ProviderError(f"HTTP error: {e.code}")
    except urllib.error.URLError as e:
        raise NetworkError(f"Network error: {e.reason}")
    except TimeoutError:
        raise NetworkError(f"Timed out after {timeout}s")
    except json.JSONDecodeError:
        raise ProviderError("Invalid JSON response")


def parse_goldapi_price_per_gram(data: dict) -> Optional[float]:
    """Extract USD per gram from a GoldAPI payload.

    Prefers the direct 24k per-gram price; falls back to the per-ounce spot.
    """
    if not isinstance(data, dict):
        return None
    per_gram = data.get('price_gram_24k')
    if isinstance(per_gram, (int, float)) and per_gram > 0:
        return float(per_gram)
    per_ounce = data.get('price')
    if isinstance(per_ounce, (int, float)) and per_ounce > 0:
        return float(per_ounce) / GRAMS_PER_TROY_OUNCE
    return None


class YahooFinanceGoldProvider(GoldSource, HistoricalGoldSource):
    """Yahoo Finance chart API for COMEX gold futures (GC=F).

    No API key. Quotes are USD per troy ounce. Serves both the live spot and
    a window of daily closes around a past date.
    """

    BASE_URL = "https://query1.finance.yahoo.com/v8/finance/chart"
    SYMBOL = "GC=F"

    def __init__(self, timeout: Optional[float] = None):
        self._timeout = timeout if timeout is not None else get_provider_timeout()

    @property
    def name(self) -> str:
        return "yahoo-finance"

    @property
    def requires_api_key(self) -> bool:
        return False

    def is_configured(self) -> bool:
        return True  # No key required

    def fetch_current(self) -> float:
        url = f"{self.BASE_URL}/{self.SYMBOL}?interval=1d&range=1d"
        result = self._chart_result(_get_json(url, {}, self._timeout))

        price = result.get('meta', {}).get('regularMarketPrice')
        if not isinstance(price, (int, float)) or price <= 0:
            raise NoDataError("No regularMarketPrice in chart response")
        return float(price) / GRAMS_PER_TROY_OUNCE

    def fetch_historical(self, target_date: date) -> float:
        """Fetch daily closes within +/-3 days and return the nearest one."""
        target = datetime.combine(target_date, time.min, tzinfo=timezone.utc)
        start = target - timedelta(days=HISTORICAL_WINDOW_DAYS)
        end = target + timedelta(days=HISTORICAL_WINDOW_DAYS + 1)
        url = (
            f"{self.BASE_URL}/{self.SYMBOL}?interval=1d"
            f"&period1={int(start.timestamp())}&period2={int(end.timestamp())}"
        )
        points = self.parse_closes(self._chart_result(_get_json(url, {}, self._timeout)))

        nearest = pick_nearest(points, target)
        if nearest is None:
            raise NoDataError(f"No closes around {target_date.isoformat()}")
        return nearest.price_per_gram_usd

    @staticmethod
    def parse_closes(result: dict) -> list[PricePoint]:
        """Turn a chart result into price points, in provider order, skipping gaps."""
        timestamps = result.get('timestamp') or []
        quotes = result.get('indicators', {}).get('quote') or [{}]
        closes = quotes[0].get('close') or []

        points = []
        for ts, close in zip(timestamps, closes):
            if not isinstance(close, (int, float)) or close <= 0:
                continue
            points.append(PricePoint(
                at=datetime.fromtimestamp(ts, tz=timezone.utc),
                price_per_gram_usd=float(close) / GRAMS_PER_TROY_OUNCE,
            ))
        return points

    @staticmethod
    def _chart_result(data: dict) -> dict:
        chart = data.get('chart') if isinstance(data, dict) else None
        if not isinstance(chart, dict):
            raise ProviderError("Unexpected response format")
        if chart.get('error'):
            raise ProviderError(f"API error: {chart['error']}")
        results = chart.get('result') or []
        if not results or not isinstance(results[0], dict):
            raise NoDataError("Empty chart result")
        return results[0]


class GoldAPIProvider(GoldSource, HistoricalGoldSource):
    """GoldAPI.io provider - requires API key.

    Provides historical and current USD-based prices.
    Free tier: 100 requests/month.
    """

    def __init__(self, api_key: Optional[str] = None, base_url: Optional[str] = None,
                 timeout: Optional[float] = None):
        self._api_key = api_key or get_goldapi_key()
        self._base_url = (base_url or get_goldapi_base_url()).rstrip('/')
        self._timeout = timeout if timeout is not None else get_provider_timeout()

    @property
    def name(self) -> str:
        return "goldapi"

    @property
    def requires_api_key(self) -> bool:
        return True

    def is_configured(self) -> bool:
        return bool(self._api_key)

    def fetch_current(self) -> float:
        return self._fetch(f"{self._base_url}/XAU/USD")

    def fetch_historical(self, target_date: date) -> float:
        """Try the compact date form first, then the dashed one."""
        date_variants = [target_date.strftime('%Y%m%d'), target_date.isoformat()]

        last_error = None
        for date_str in date_variants:
            try:
                return self._fetch(f"{self._base_url}/XAU/USD/{date_str}")
            except (RateLimitError, AuthenticationError):
                raise
            except ProviderError as e:
                last_error = e
                continue
        raise last_error

    def _fetch(self, url: str) -> float:
        if not self._api_key:
            raise AuthenticationError("API key not configured")

        data = _get_json(url, {'x-access-token': self._api_key}, self._timeout)
        price_per_gram = parse_goldapi_price_per_gram(data)
        if price_per_gram is None:
            raise NoDataError("GoldAPI returned unexpected payload")
        return price_per_gram
