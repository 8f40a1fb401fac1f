# folio/cache.py
# Purpose: In-memory store of the last known quote per symbol.
# Why: Avoid hitting cse.lk when the answer cannot have changed.
# Pitfalls: Not persistent; a process restart always starts cold.
#           The sweeper runs on a scheduler thread, so every operation takes the lock.

from __future__ import annotations

import threading
from datetime import datetime

from folio.models import CachedQuote, Quote


class QuoteCache:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        # store: symbol -> CachedQuote (immutable, replaced whole on every write)
        self._entries: dict[str, CachedQuote] = {}

    def get(self, symbol: str) -> CachedQuote | None:
        with self._lock:
            return self._entries.get(symbol)

    def put(self, symbol: str, value: Quote, fetched_at: datetime) -> CachedQuote:
        entry = CachedQuote(symbol=symbol, value=value, fetched_at=fetched_at)
        with self._lock:
            self._entries[symbol] = entry
        return entry

    def evict_older_than(self, cutoff: datetime) -> int:
        """Drop every entry fetched strictly before cutoff. Returns how many went."""
        with self._lock:
            stale = [s for s, e in self._entries.items() if e.fetched_at < cutoff]
            for s in stale:
                del self._entries[s]
        return len(stale)

    def clear(self) -> int:
        with self._lock:
            n = len(self._entries)
            self._entries.clear()
        return n

    def size(self) -> int:
        with self._lock:
            return len(self._entries)

    __len__ = size

    def snapshot(self, now: datetime) -> list[tuple[str, float, Quote]]:
        """(symbol, age_minutes, value) for every entry, ordered by symbol."""
        with self._lock:
            entries = sorted(self._entries.values(), key=lambda e: e.symbol)
        return [
            (e.symbol, round((now - e.fetched_at).total_seconds() / 60.0, 2), e.value)
            for e in entries
        ]
