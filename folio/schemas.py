from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


# --- Health payload ---
class HealthResponse(BaseModel):
    status: Literal["ok"] = "ok"
    as_of: str
    service: str = "folio-quotes"
    market_open: bool
    cache_entries: int


# --- Version payload ---
class VersionResponse(BaseModel):
    service: str  # "folio-quotes:0.3.0"
    service_version: str
    build_time: str  # UTC ISO


# --- Error taxonomy ---
class ErrorCode(str, Enum):
    INVALID_SYMBOL = "INVALID_SYMBOL"
    UPSTREAM_UNAVAILABLE = "UPSTREAM_UNAVAILABLE"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ErrorDetail(BaseModel):
    code: ErrorCode
    message: str
    hint: str | None = None


class ErrorResponse(BaseModel):
    error: ErrorDetail


# --- Quotes ---
class QuoteOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    symbol: str
    last_traded_price: float | None = None
    previous_close: float | None = None
    price: float | None = Field(None, description="last traded, else previous close")


class QuoteResponse(BaseModel):
    symbol: str
    value: QuoteOut
    fetched_at: datetime


class CacheEntryOut(BaseModel):
    symbol: str
    age_minutes: float
    value: QuoteOut


class CacheSnapshotResponse(BaseModel):
    is_market_open: bool
    total_entries: int
    entries: list[CacheEntryOut]


class ClearCacheResponse(BaseModel):
    removed_count: int


class PortfolioQuotesResponse(BaseModel):
    quotes: list[QuoteResponse]
    unavailable: list[str] = Field(default_factory=list)
