"""Pluggable gold price source interface."""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional


@dataclass(frozen=True)
class GoldPriceQuote:
    """Resolved gold price per gram."""
    price_per_gram: float   # reporting currency, rounded to 2 dp
    as_of: datetime         # UTC
    source: str             # live, cached, fallback, manual
    provider: str
    currency: str

    def to_dict(self) -> dict:
        return {
            'price_per_gram': self.price_per_gram,
            'as_of': self.as_of.isoformat(),
            'source': self.source,
            'provider': self.provider,
            'currency': self.currency,
        }


@dataclass
class PricePoint:
    """Historical daily close."""
    at: datetime            # UTC
    price_per_gram_usd: float


class GoldSource(ABC):
    """Abstract base for current gold price sources.

    ``fetch_current`` returns USD per gram, or raises ProviderError when the
    source is unavailable. Unit conversion to the reporting currency is the
    resolver's job.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider identifier."""
        pass

    @property
    @abstractmethod
    def requires_api_key(self) -> bool:
        """Whether this provider needs an API key."""
        pass

    @abstractmethod
    def is_configured(self) -> bool:
        """Check if provider is properly configured (API key set if required)."""
        pass

    @abstractmethod
    def fetch_current(self) -> float:
        """Fetch the current gold price.

        Returns:
            USD per gram

        Raises:
            ProviderError: If fetch fails
        """
        pass


class HistoricalGoldSource(ABC):
    """Abstract base for historical gold price sources."""

    @property
    @abstractmethod
    def name(self) -> str:
        pass

    @abstractmethod
    def is_configured(self) -> bool:
        pass

    @abstractmethod
    def fetch_historical(self, target_date: date) -> float:
        """Fetch the gold price for a past date.

        Returns:
            USD per gram

        Raises:
            ProviderError: If no price is available for the date
        """
        pass


class ProviderError(Exception):
    """Base exception for provider errors."""
    pass


class RateLimitError(ProviderError):
    """API rate limit exceeded."""
    pass


class AuthenticationError(ProviderError):
    """API key invalid or missing."""
    pass


class NetworkError(ProviderError):
    """Network connectivity issue or timeout."""
    pass


class NoDataError(ProviderError):
    """Provider answered but had no usable price."""
    pass


def pick_nearest(points: list[PricePoint], target: datetime) -> Optional[PricePoint]:
    """Return the point closest to ``target``; on a tie the earlier-listed point wins."""
    best = None
    best_delta = None
    for point in points:
        delta = abs((point.at - target).total_seconds())
        if best_delta is None or delta < best_delta:
            best = point
            best_delta = delta
    return best
