"""In-process cache for the last resolved gold quote."""
import threading
from datetime import datetime
from typing import Optional

from quroosh.constants import DEFAULT_GOLD_CACHE_SECONDS
from .providers import GoldPriceQuote


class QuoteCache:
    """Holds the last known-good gold quote for the lifetime of the process.

    The (quote, as_of) pair is stored as a single immutable GoldPriceQuote so
    readers never see a torn value. ``lock`` is exposed so the resolver can
    hold it across a refresh and keep concurrent callers from racing two
    upstream fetches.
    """

    def __init__(self):
        self.lock = threading.RLock()
        self._quote: Optional[GoldPriceQuote] = None

    def get(self) -> Optional[GoldPriceQuote]:
        with self.lock:
            return self._quote

    def set(self, quote: GoldPriceQuote) -> None:
        with self.lock:
            self._quote = quote

    def clear(self) -> None:
        with self.lock:
            self._quote = None


def is_cache_valid(quote: Optional[GoldPriceQuote], now: datetime, ttl: int = DEFAULT_GOLD_CACHE_SECONDS) -> bool:
    """Check if a cached quote is still inside its freshness window."""
    if quote is None or quote.as_of is None:
        return False
    age = (now - quote.as_of).total_seconds()
    return 0 <= age < ttl
