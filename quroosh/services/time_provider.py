"""Time provider abstraction for testable date handling.

All times in this module are UTC. Holding periods, cache freshness and
historical back-estimation all read "now" from here so tests can freeze it.
"""
from datetime import date, datetime, timezone
from typing import Optional

from quroosh.errors import InvalidInputError


class TimeProvider:
    """Provides the current UTC time, allowing tests to freeze it.

    Usage:
        # Production: uses real UTC time
        provider = TimeProvider()
        now = provider.now()

        # Testing: freeze to a specific instant
        provider = TimeProvider(frozen_at=datetime(2026, 1, 15, tzinfo=timezone.utc))
        now = provider.now()  # Always returns 2026-01-15T00:00:00+00:00
    """

    _instance: Optional['TimeProvider'] = None

    def __init__(self, frozen_at: Optional[datetime] = None):
        """Initialize TimeProvider.

        Args:
            frozen_at: If provided, now() always returns this instant. Naive
                       values are taken as UTC.
        """
        if frozen_at is not None and frozen_at.tzinfo is None:
            frozen_at = frozen_at.replace(tzinfo=timezone.utc)
        self._frozen_at = frozen_at

    def now(self) -> datetime:
        """Get the current timezone-aware UTC datetime (or the frozen one)."""
        if self._frozen_at is not None:
            return self._frozen_at
        return datetime.now(timezone.utc)

    def today(self) -> date:
        return self.now().date()

    @classmethod
    def get_default(cls) -> 'TimeProvider':
        """Get the default TimeProvider instance (singleton for production)."""
        if cls._instance is None:
            cls._instance = TimeProvider()
        return cls._instance

    @classmethod
    def set_default(cls, provider: 'TimeProvider') -> None:
        """Set the default TimeProvider (for testing)."""
        cls._instance = provider

    @classmethod
    def reset_default(cls) -> None:
        """Reset to production TimeProvider."""
        cls._instance = None


def get_now(time_provider: Optional[TimeProvider] = None) -> datetime:
    """Convenience function to get the current UTC datetime."""
    if time_provider is None:
        time_provider = TimeProvider.get_default()
    return time_provider.now()


def get_today(time_provider: Optional[TimeProvider] = None) -> date:
    """Convenience function to get today's UTC date."""
    return get_now(time_provider).date()


def parse_datetime(value) -> datetime:
    """Parse a timezone-aware UTC datetime from a date, datetime or ISO-8601 string.

    Bare dates become UTC midnight; naive datetimes are taken as UTC.

    Raises:
        InvalidInputError: If the value is not a valid calendar date.
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if isinstance(value, str) and value.strip():
        try:
            return parse_datetime(datetime.fromisoformat(value.strip().replace('Z', '+00:00')))
        except ValueError:
            pass
    raise InvalidInputError(f'Invalid date: {value!r}')


def parse_date(value) -> date:
    """Parse a calendar date (UTC) from a date, datetime or ISO-8601 string."""
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    return parse_datetime(value).date()
