# folio/models.py
# Purpose: Plain domain types shared by the cache, the upstream client and the resolver.

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Quote:
    symbol: str
    last_traded_price: float | None = None
    previous_close: float | None = None

    @property
    def price(self) -> float | None:
        """Last traded price, falling back to previous close."""
        if self.last_traded_price is not None:
            return self.last_traded_price
        return self.previous_close


@dataclass(frozen=True)
class CachedQuote:
    symbol: str
    value: Quote
    fetched_at: datetime


# --- Upstream fetch outcome: exactly one of these comes back from a QuoteSource ---


@dataclass(frozen=True)
class QuoteFetched:
    quote: Quote


@dataclass(frozen=True)
class FetchFailed:
    reason: str


FetchResult = QuoteFetched | FetchFailed
