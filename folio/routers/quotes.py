# folio/routers/quotes.py
from __future__ import annotations

from fastapi import APIRouter, Depends, Request, status
from fastapi.concurrency import run_in_threadpool

from folio.errors import UpstreamUnavailable, http_error
from folio.models import CachedQuote, Quote
from folio.portfolio import PortfolioReader
from folio.resolver import QuoteResolver
from folio.schemas import (
    CacheEntryOut,
    CacheSnapshotResponse,
    ClearCacheResponse,
    ErrorCode,
    PortfolioQuotesResponse,
    QuoteOut,
    QuoteResponse,
)
from folio.utils import normalize_symbol

router = APIRouter(prefix="/api/v1", tags=["quotes"])


# --------- dependencies (overridable in tests) ---------


def get_resolver(request: Request) -> QuoteResolver:
    return request.app.state.resolver


def get_portfolio(request: Request) -> PortfolioReader:
    return request.app.state.portfolio


# --------- mapping ---------


def _quote_out(q: Quote) -> QuoteOut:
    return QuoteOut(
        symbol=q.symbol,
        last_traded_price=q.last_traded_price,
        previous_close=q.previous_close,
        price=q.price,
    )


def _quote_response(entry: CachedQuote) -> QuoteResponse:
    return QuoteResponse(
        symbol=entry.symbol, value=_quote_out(entry.value), fetched_at=entry.fetched_at
    )


# --------- routes ---------
# /quotes/cache is registered before /quotes/{symbol} so "cache" is never read as a ticker.


@router.get("/quotes/cache", response_model=CacheSnapshotResponse)
def cache_snapshot(resolver: QuoteResolver = Depends(get_resolver)):
    snap = resolver.snapshot()
    return CacheSnapshotResponse(
        is_market_open=snap.is_market_open,
        total_entries=snap.total_entries,
        entries=[
            CacheEntryOut(symbol=sym, age_minutes=age, value=_quote_out(q))
            for sym, age, q in snap.entries
        ],
    )


@router.delete("/quotes/cache", response_model=ClearCacheResponse)
def clear_cache(resolver: QuoteResolver = Depends(get_resolver)):
    return ClearCacheResponse(removed_count=resolver.clear())


@router.get("/quotes/{symbol}", response_model=QuoteResponse)
async def get_quote(symbol: str, resolver: QuoteResolver = Depends(get_resolver)):
    sym = normalize_symbol(symbol)
    if sym is None:
        raise http_error(
            ErrorCode.INVALID_SYMBOL,
            f"not a valid equity symbol: {symbol!r}",
            hint="use the bare ticker, e.g. JKH",
        )
    try:
        entry = await resolver.resolve_quote(sym)
    except UpstreamUnavailable as e:
        raise http_error(
            ErrorCode.UPSTREAM_UNAVAILABLE,
            f"quote for {sym} is temporarily unavailable",
            http_status=status.HTTP_503_SERVICE_UNAVAILABLE,
            hint=e.reason,
        ) from e
    return _quote_response(entry)


@router.get("/portfolio/quotes", response_model=PortfolioQuotesResponse)
async def portfolio_quotes(
    resolver: QuoteResolver = Depends(get_resolver),
    portfolio: PortfolioReader = Depends(get_portfolio),
):
    """Quotes for every symbol currently held; symbols with no data at all are listed apart."""
    symbols = await run_in_threadpool(portfolio.held_symbols)
    quotes, unavailable = await resolver.resolve_many(symbols)
    return PortfolioQuotesResponse(
        quotes=[_quote_response(q) for q in quotes], unavailable=unavailable
    )
