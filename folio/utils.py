import re
from datetime import UTC, datetime

# ticker, optionally followed by a board suffix (".N0000", ".X0000") that we drop
_SYMBOL_RE = re.compile(r"^([A-Z0-9&]{1,12})(?:\.[A-Z0-9]{1,6})?$")


def utc_now() -> datetime:
    return datetime.now(tz=UTC)


def utc_now_iso() -> str:
    return utc_now().isoformat()


def normalize_symbol(symbol: str) -> str | None:
    """Bare upper-case ticker ('jkh.n0000' -> 'JKH'); None if it doesn't look like one."""
    m = _SYMBOL_RE.match((symbol or "").strip().upper())
    return m.group(1) if m else None
