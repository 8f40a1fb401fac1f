# folio/resolver.py
# Purpose: Decide, per request, whether to fetch a live quote or serve the cached one.
# Rules:
#   market open   -> always fetch; on failure fall back to the cached entry if any.
#   market closed -> cached entry is authoritative; fetch only to fill an empty slot.
# Pitfalls: Concurrent resolves for one symbol may both fetch; the last put wins.

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime

from folio.cache import QuoteCache
from folio.data_client import QuoteSource
from folio.errors import UpstreamUnavailable
from folio.models import CachedQuote, Quote, QuoteFetched
from folio.observability import (
    CACHE_ENTRIES,
    CACHE_EVICTIONS,
    QUOTE_RESOLUTIONS,
    UPSTREAM_FETCHES,
)
from folio.trading_calendar import TradingWindow, is_market_open
from folio.utils import utc_now

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


@dataclass(frozen=True)
class CacheSnapshot:
    is_market_open: bool
    total_entries: int
    entries: list[tuple[str, float, Quote]]


class QuoteResolver:
    def __init__(
        self,
        cache: QuoteCache,
        source: QuoteSource,
        window: TradingWindow,
        clock: Clock = utc_now,
        max_concurrent_fetches: int = 4,
    ):
        self.cache = cache
        self.source = source
        self.window = window
        self.clock = clock
        self.max_concurrent_fetches = max(1, max_concurrent_fetches)

    def market_open(self) -> bool:
        return is_market_open(self.clock(), self.window)

    async def resolve_quote(self, symbol: str) -> CachedQuote:
        """
        Return the freshest safe-to-serve quote for symbol.
        Raises UpstreamUnavailable only when nothing is cached and the live fetch failed.
        Callers can tell stale from fresh by looking at fetched_at.
        """
        cached = self.cache.get(symbol)

        if not self.market_open() and cached is not None:
            QUOTE_RESOLUTIONS.labels(outcome="cache_hit").inc()
            return cached

        result = await self.source.fetch_quote(symbol)

        if isinstance(result, QuoteFetched):
            UPSTREAM_FETCHES.labels(result="ok").inc()
            entry = self.cache.put(symbol, result.quote, self.clock())
            CACHE_ENTRIES.set(self.cache.size())
            QUOTE_RESOLUTIONS.labels(outcome="live").inc()
            logger.info("quote %s fetched: price=%s", symbol, result.quote.price)
            return entry

        UPSTREAM_FETCHES.labels(result="failed").inc()
        if cached is not None:
            QUOTE_RESOLUTIONS.labels(outcome="stale_fallback").inc()
            logger.warning(
                "live fetch for %s failed (%s); serving cached quote from %s",
                symbol,
                result.reason,
                cached.fetched_at.isoformat(),
            )
            return cached

        QUOTE_RESOLUTIONS.labels(outcome="unavailable").inc()
        logger.info("quote %s unavailable: %s", symbol, result.reason)
        raise UpstreamUnavailable(symbol, result.reason)

    async def resolve_many(
        self, symbols: Iterable[str]
    ) -> tuple[list[CachedQuote], list[str]]:
        """
        Resolve several symbols concurrently, at most max_concurrent_fetches at a time.
        Returns (quotes, unavailable_symbols).
        """
        syms = list(dict.fromkeys(symbols))
        # created per call so it binds to the running loop
        gate = asyncio.Semaphore(self.max_concurrent_fetches)

        async def _one(sym: str) -> CachedQuote:
            async with gate:
                return await self.resolve_quote(sym)

        results = await asyncio.gather(*(_one(s) for s in syms), return_exceptions=True)
        quotes: list[CachedQuote] = []
        unavailable: list[str] = []
        for sym, res in zip(syms, results, strict=True):
            if isinstance(res, UpstreamUnavailable):
                unavailable.append(sym)
            elif isinstance(res, BaseException):
                raise res
            else:
                quotes.append(res)
        return quotes, unavailable

    def snapshot(self) -> CacheSnapshot:
        now = self.clock()
        entries = self.cache.snapshot(now)
        return CacheSnapshot(
            is_market_open=is_market_open(now, self.window),
            total_entries=len(entries),
            entries=entries,
        )

    def clear(self) -> int:
        removed = self.cache.clear()
        CACHE_EVICTIONS.labels(reason="clear").inc(removed)
        CACHE_ENTRIES.set(0)
        logger.info("quote cache cleared: %d entries removed", removed)
        return removed
