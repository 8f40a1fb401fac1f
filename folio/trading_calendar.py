# folio/trading_calendar.py
# Purpose: Decide whether the exchange is open at a given instant.
# Notes: Times are compared as minutes-since-midnight, never as "HH:MM:SS" strings.

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from zoneinfo import ZoneInfo

from folio.errors import ConfigError

# Monday=0 .. Friday=4
_WEEKDAYS = frozenset(range(5))


def parse_hhmm(value: str) -> int:
    """Parse "HH:MM" into minutes since midnight."""
    parts = (value or "").strip().split(":")
    if len(parts) != 2 or not all(p.isdigit() for p in parts):
        raise ConfigError(f"expected HH:MM, got {value!r}")
    h, m = int(parts[0]), int(parts[1])
    if not (0 <= h < 24 and 0 <= m < 60):
        raise ConfigError(f"time out of range: {value!r}")
    return h * 60 + m


@dataclass(frozen=True)
class TradingWindow:
    open_minute: int = 9 * 60 + 15
    close_minute: int = 14 * 60 + 30
    close_inclusive: bool = True
    tz: tzinfo = field(default_factory=lambda: ZoneInfo("Asia/Colombo"))

    def __post_init__(self) -> None:
        if not (0 <= self.open_minute < self.close_minute <= 24 * 60):
            raise ConfigError(
                f"trading window must open before it closes "
                f"(open={self.open_minute}, close={self.close_minute})"
            )

    @classmethod
    def from_strings(
        cls, open_at: str, close_at: str, *, close_inclusive: bool = True, tz: tzinfo | None = None
    ) -> TradingWindow:
        return cls(
            open_minute=parse_hhmm(open_at),
            close_minute=parse_hhmm(close_at),
            close_inclusive=close_inclusive,
            tz=tz or ZoneInfo("Asia/Colombo"),
        )


def is_market_open(now: datetime, window: TradingWindow) -> bool:
    """
    True on Mon-Fri when the time of day is within [open, close].
    Aware datetimes are converted to the window's timezone; naive ones are
    assumed to already be exchange-local.
    """
    local = now.astimezone(window.tz) if now.tzinfo is not None else now
    if local.weekday() not in _WEEKDAYS:
        return False
    minute = local.hour * 60 + local.minute
    if minute < window.open_minute:
        return False
    if window.close_inclusive:
        return minute <= window.close_minute
    return minute < window.close_minute
