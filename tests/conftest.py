from __future__ import annotations

from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from folio.cache import QuoteCache
from folio.models import FetchFailed, FetchResult, Quote, QuoteFetched
from folio.resolver import QuoteResolver
from folio.trading_calendar import TradingWindow

COLOMBO = ZoneInfo("Asia/Colombo")

# 2025-01-15 is a Wednesday, 2025-01-18 a Saturday.
WED_MIDDAY = datetime(2025, 1, 15, 11, 0, tzinfo=COLOMBO)
WED_EVENING = datetime(2025, 1, 15, 18, 0, tzinfo=COLOMBO)
SAT_10AM = datetime(2025, 1, 18, 10, 0, tzinfo=COLOMBO)


class FakeClock:
    """Settable clock; call it to read the time."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class FakeQuoteSource:
    """Scripted upstream: returns a fixed price, or fails, and counts calls."""

    def __init__(self, price: float | None = 100.0):
        self.price = price
        self.fail_reason: str | None = None
        self.calls: list[str] = []

    def fail(self, reason: str = "http 503") -> None:
        self.fail_reason = reason

    def recover(self, price: float) -> None:
        self.fail_reason = None
        self.price = price

    async def fetch_quote(self, symbol: str) -> FetchResult:
        self.calls.append(symbol)
        if self.fail_reason is not None:
            return FetchFailed(reason=self.fail_reason)
        return QuoteFetched(quote=Quote(symbol=symbol, last_traded_price=self.price))


@pytest.fixture
def window() -> TradingWindow:
    return TradingWindow(tz=COLOMBO)


@pytest.fixture
def cache() -> QuoteCache:
    return QuoteCache()


@pytest.fixture
def source() -> FakeQuoteSource:
    return FakeQuoteSource()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(WED_MIDDAY)


@pytest.fixture
def resolver(cache, source, window, clock) -> QuoteResolver:
    return QuoteResolver(cache, source, window, clock=clock)
