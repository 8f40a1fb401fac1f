# folio/config.py
# Purpose: Environment-driven settings for the quote service.
# Pitfalls: Settings are validated once at startup; a bad value is fatal, not per-request.

from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import timedelta
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from folio.errors import ConfigError
from folio.trading_calendar import TradingWindow

DEFAULT_UPSTREAM_URL = "https://www.cse.lk/api/companyInfoSummery"


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    s = raw.strip().lower()
    if s in {"1", "true", "yes", "y", "on"}:
        return True
    if s in {"0", "false", "no", "n", "off"}:
        return False
    raise ConfigError(f"{name} must be a boolean, got {raw!r}")


def _env_float(name: str, default: float, *, minimum: float = 0.0) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        val = float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from None
    if val <= minimum:
        raise ConfigError(f"{name} must be > {minimum}, got {val}")
    return val


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        val = int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from None
    if val < 1:
        raise ConfigError(f"{name} must be >= 1, got {val}")
    return val


@dataclass(frozen=True)
class Settings:
    window: TradingWindow = field(default_factory=TradingWindow)
    retention: timedelta = timedelta(hours=24)
    sweep_interval: timedelta = timedelta(minutes=60)
    upstream_url: str = DEFAULT_UPSTREAM_URL
    upstream_timeout_s: float = 5.0
    symbol_suffix: str = ".N0000"
    upstream_max_concurrency: int = 4
    database_url: str = "sqlite:///./portfolio.db"


def load_settings() -> Settings:
    """Build Settings from FOLIO_* env vars. Raises ConfigError on malformed values."""
    tz_name = os.getenv("FOLIO_MARKET_TZ", "Asia/Colombo")
    try:
        tz = ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ConfigError(f"FOLIO_MARKET_TZ: unknown timezone {tz_name!r}") from None

    window = TradingWindow.from_strings(
        os.getenv("FOLIO_MARKET_OPEN", "09:15"),
        os.getenv("FOLIO_MARKET_CLOSE", "14:30"),
        close_inclusive=_env_bool("FOLIO_MARKET_CLOSE_INCLUSIVE", True),
        tz=tz,
    )

    return Settings(
        window=window,
        retention=timedelta(hours=_env_float("FOLIO_CACHE_RETENTION_HOURS", 24.0)),
        sweep_interval=timedelta(minutes=_env_float("FOLIO_SWEEP_INTERVAL_MIN", 60.0)),
        upstream_url=os.getenv("FOLIO_UPSTREAM_URL", DEFAULT_UPSTREAM_URL),
        upstream_timeout_s=_env_float("FOLIO_UPSTREAM_TIMEOUT_SEC", 5.0),
        symbol_suffix=os.getenv("FOLIO_SYMBOL_SUFFIX", ".N0000"),
        upstream_max_concurrency=_env_int("FOLIO_UPSTREAM_MAX_CONCURRENCY", 4),
        database_url=os.getenv("FOLIO_DATABASE_URL", "sqlite:///./portfolio.db"),
    )
