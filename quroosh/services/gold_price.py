"""Gold price resolution: current price per gram and historical estimates.

Current price precedence:
    1. Manual override (GOLD_PRICE_PER_GRAM, reporting currency)
    2. Fresh cached quote (inside the freshness window)
    3. Live sources in order (primary market data, then GoldAPI)
    4. Stale cached quote, however old
    5. Random price inside a realistic band, which is then cached

Historical price precedence:
    1. Historical sources in order (nearest close within +/-3 days, then exact date)
    2. Reverse compound decay from the current price at 8% a year

Neither path raises for upstream trouble. The only error a caller can see is
InvalidInputError for a bad date or a bad current-price override.
"""
import logging
import math
import random
from dataclasses import replace
from datetime import datetime, time, timezone
from typing import Callable, Optional

from quroosh.constants import (
    ANNUAL_GOLD_APPRECIATION_RATE,
    DAYS_PER_YEAR,
    FALLBACK_USD_PER_OUNCE_MAX,
    FALLBACK_USD_PER_OUNCE_MIN,
    SOURCE_CACHED,
    SOURCE_FALLBACK,
    SOURCE_LIVE,
    SOURCE_MANUAL,
)
from quroosh.errors import InvalidInputError
from quroosh.services.cache import QuoteCache, is_cache_valid
from quroosh.services.config import (
    get_cache_seconds,
    get_manual_gold_price,
    get_reporting_currency,
    get_usd_to_local_rate,
)
from quroosh.services.fx import ounce_to_gram, round_half_up, usd_per_gram_to_local
from quroosh.services.providers import GoldPriceQuote, GoldSource, HistoricalGoldSource, ProviderError
from quroosh.services.providers.registry import get_current_sources, get_historical_sources
from quroosh.services.time_provider import TimeProvider, get_now, parse_date

logger = logging.getLogger(__name__)


def _is_usable_price(value) -> bool:
    return (isinstance(value, (int, float)) and not isinstance(value, bool)
            and math.isfinite(value) and value > 0)


class GoldPriceResolver:
    """Resolves gold prices through an ordered chain of sources.

    Everything is injectable so tests can run it with fake sources, a frozen
    clock and a seeded random generator. The cache is owned by whoever builds
    the resolver (the app factory keeps one per process).
    """

    def __init__(
        self,
        current_sources: Optional[list[GoldSource]] = None,
        historical_sources: Optional[list[HistoricalGoldSource]] = None,
        cache: Optional[QuoteCache] = None,
        time_provider: Optional[TimeProvider] = None,
        manual_price: Callable[[], Optional[float]] = get_manual_gold_price,
        cache_seconds: Optional[int] = None,
        usd_to_local_rate: Optional[float] = None,
        currency: Optional[str] = None,
        rng: Optional[random.Random] = None,
    ):
        self.current_sources = current_sources if current_sources is not None else get_current_sources()
        self.historical_sources = (
            historical_sources if historical_sources is not None else get_historical_sources()
        )
        self.cache = cache if cache is not None else QuoteCache()
        self.time_provider = time_provider
        self._manual_price = manual_price
        self.cache_seconds = cache_seconds if cache_seconds is not None else get_cache_seconds()
        self.usd_to_local_rate = usd_to_local_rate if usd_to_local_rate is not None else get_usd_to_local_rate()
        self.currency = currency or get_reporting_currency()
        self._rng = rng or random.Random()

    def _now(self) -> datetime:
        return get_now(self.time_provider)

    def get_current_price(self) -> GoldPriceQuote:
        """Return the current gold price per gram. Never raises."""
        manual = self._manual_price()
        if manual is not None and _is_usable_price(manual):
            return GoldPriceQuote(
                price_per_gram=round_half_up(manual),
                as_of=self._now(),
                source=SOURCE_MANUAL,
                provider='manual-override',
                currency=self.currency,
            )

        # Held across the refresh so concurrent callers wait for one fetch
        with self.cache.lock:
            cached = self.cache.get()
            now = self._now()
            if is_cache_valid(cached, now, self.cache_seconds):
                return replace(cached, source=SOURCE_CACHED)

            quote = self._fetch_live(now)
            if quote is not None:
                self.cache.set(quote)
                logger.info(f"Gold price {quote.price_per_gram} {quote.currency}/g from {quote.provider}")
                return quote

            if cached is not None:
                logger.info(
                    f"Gold price sources unavailable, serving stale quote from "
                    f"{cached.as_of.isoformat()} ({cached.price_per_gram} {cached.currency}/g)"
                )
                return replace(cached, source=SOURCE_CACHED)

            quote = self._fallback_quote(now)
            self.cache.set(quote)
            logger.warning(f"Gold price sources unavailable, using fallback {quote.price_per_gram} {quote.currency}/g")
            return quote

    def get_current_price_per_gram(self) -> float:
        return self.get_current_price().price_per_gram

    def _to_local(self, price_usd) -> Optional[float]:
        """USD per gram to reporting currency per gram, or None if unusable."""
        if not _is_usable_price(price_usd) or not _is_usable_price(price_usd * self.usd_to_local_rate):
            return None
        return usd_per_gram_to_local(price_usd, self.usd_to_local_rate)

    def _fetch_live(self, now: datetime) -> Optional[GoldPriceQuote]:
        for source in self.current_sources:
            if not source.is_configured():
                continue
            try:
                price_usd = source.fetch_current()
            except ProviderError as e:
                logger.warning(f"Gold source {source.name} failed: {e}")
                continue
            except Exception:
                logger.exception(f"Gold source {source.name} raised unexpectedly")
                continue

            price = self._to_local(price_usd)
            if price is None:
                logger.warning(f"Gold source {source.name} returned unusable price {price_usd!r}")
                continue
            return GoldPriceQuote(
                price_per_gram=price,
                as_of=now,
                source=SOURCE_LIVE,
                provider=source.name,
                currency=self.currency,
            )
        return None

    def _fallback_quote(self, now: datetime) -> GoldPriceQuote:
        per_ounce = self._rng.uniform(FALLBACK_USD_PER_OUNCE_MIN, FALLBACK_USD_PER_OUNCE_MAX)
        return GoldPriceQuote(
            price_per_gram=usd_per_gram_to_local(ounce_to_gram(per_ounce), self.usd_to_local_rate),
            as_of=now,
            source=SOURCE_FALLBACK,
            provider='fallback',
            currency=self.currency,
        )

    def get_historical_price(self, target, current_price_override: Optional[float] = None) -> float:
        """Return the gold price per gram as of ``target``, rounded to 2 dp.

        Args:
            target: date, datetime or ISO-8601 string
            current_price_override: Current price per gram (reporting currency)
                to base the decay estimate on instead of resolving one.

        Raises:
            InvalidInputError: If target is not a valid date or the override
                is not a finite positive number.
        """
        target_date = parse_date(target)
        if current_price_override is not None and not _is_usable_price(current_price_override):
            raise InvalidInputError(f'Invalid current price override: {current_price_override!r}')

        for source in self.historical_sources:
            if not source.is_configured():
                continue
            try:
                price_usd = source.fetch_historical(target_date)
            except ProviderError as e:
                logger.warning(f"Historical gold source {source.name} failed for {target_date}: {e}")
                continue
            except Exception:
                logger.exception(f"Historical gold source {source.name} raised unexpectedly")
                continue
            price = self._to_local(price_usd)
            if price is not None:
                return price
            logger.warning(f"Historical gold source {source.name} returned unusable price {price_usd!r}")

        if current_price_override is not None:
            current_price = float(current_price_override)
        else:
            current_price = self.get_current_price_per_gram()

        # Whole days between the two UTC dates
        target_at = datetime.combine(target_date, time.min, tzinfo=timezone.utc)
        today_at = datetime.combine(self._now().astimezone(timezone.utc).date(), time.min, tzinfo=timezone.utc)
        return estimate_historical_price(current_price, target_at, today_at)


def estimate_historical_price(current_price: float, target_at: datetime, now: datetime,
                              annual_rate: float = ANNUAL_GOLD_APPRECIATION_RATE) -> float:
    """Back out a past price assuming steady compound appreciation.

    historical = current / (1 + annual_rate) ** years, with years measured as
    elapsed days / 365.25.
    """
    years = (now - target_at).total_seconds() / 86400 / DAYS_PER_YEAR
    return round_half_up(current_price / math.pow(1 + annual_rate, years))
