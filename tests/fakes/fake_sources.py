"""Fake gold price sources for testing without network calls."""
from datetime import date

from quroosh.services.providers import GoldSource, HistoricalGoldSource, NetworkError


class FakeGoldSource(GoldSource, HistoricalGoldSource):
    """Scripted source returning USD per gram.

    ``prices`` is consumed one per fetch_current() call; the last price is
    repeated once the list runs out. An Exception instance in the list is
    raised instead of returned.
    """

    def __init__(self, prices=None, historical=None, name='fake', configured=True):
        self._prices = list(prices or [])
        self._historical = dict(historical or {})
        self._name = name
        self._configured = configured
        self.current_calls = 0
        self.historical_calls: list[date] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def requires_api_key(self) -> bool:
        return False

    def is_configured(self) -> bool:
        return self._configured

    def fetch_current(self) -> float:
        self.current_calls += 1
        if not self._prices:
            raise NetworkError('fake source is down')
        index = min(self.current_calls - 1, len(self._prices) - 1)
        value = self._prices[index]
        if isinstance(value, Exception):
            raise value
        return value

    def fetch_historical(self, target_date: date) -> float:
        self.historical_calls.append(target_date)
        if target_date not in self._historical:
            raise NetworkError(f'no data for {target_date}')
        return self._historical[target_date]


class FailingGoldSource(FakeGoldSource):
    """Source whose every call fails."""

    def __init__(self, name='failing'):
        super().__init__(prices=[], name=name)
