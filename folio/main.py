# folio/main.py
from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from folio.cache import QuoteCache
from folio.config import Settings, load_settings
from folio.data_client import CseQuoteSource, QuoteSource
from folio.errors import envelope_from_http_exception
from folio.logging_conf import setup_logging
from folio.maintenance import CacheSweeper

# --- Observability ---
from folio.observability import metrics_endpoint, timing_middleware
from folio.portfolio import PortfolioReader
from folio.resolver import Clock, QuoteResolver

# --- Routers ---
from folio.routers import quotes  # /api/v1/quotes etc.
from folio.schemas import HealthResponse, VersionResponse
from folio.utils import utc_now, utc_now_iso
from folio.version import SERVICE_VERSION, service_version_payload


def create_app(
    settings: Settings | None = None,
    *,
    source: QuoteSource | None = None,
    portfolio: PortfolioReader | None = None,
    clock: Clock = utc_now,
    run_sweeper: bool = True,
) -> FastAPI:
    """
    Wire cache, resolver and sweeper onto one app instance.
    Settings are loaded eagerly so a bad FOLIO_* value fails here, not on the first request.
    """
    settings = settings or load_settings()
    cache = QuoteCache()
    source = source or CseQuoteSource(
        settings.upstream_url,
        timeout_s=settings.upstream_timeout_s,
        suffix=settings.symbol_suffix,
    )
    resolver = QuoteResolver(
        cache,
        source,
        settings.window,
        clock=clock,
        max_concurrent_fetches=settings.upstream_max_concurrency,
    )
    sweeper = CacheSweeper(
        cache, retention=settings.retention, interval=settings.sweep_interval, clock=clock
    )

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        if run_sweeper:
            sweeper.start()
        try:
            yield
        finally:
            sweeper.shutdown()

    app = FastAPI(title="Folio Quotes", version=SERVICE_VERSION, lifespan=lifespan)
    app.state.settings = settings
    app.state.cache = cache
    app.state.resolver = resolver
    app.state.sweeper = sweeper
    app.state.portfolio = portfolio or PortfolioReader.from_url(settings.database_url)

    # --- Include routers ---
    app.include_router(quotes.router)

    # --- Observability ---
    app.middleware("http")(timing_middleware)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(_: Request, exc: StarletteHTTPException):
        body = envelope_from_http_exception(exc)
        return JSONResponse(status_code=exc.status_code, content=body.model_dump(mode="json"))

    # --- Utility endpoints ---

    @app.get("/health", response_model=HealthResponse)
    def health():
        return HealthResponse(
            as_of=utc_now_iso(),
            market_open=resolver.market_open(),
            cache_entries=cache.size(),
        )

    @app.get("/version", response_model=VersionResponse)
    def version():
        return VersionResponse(**service_version_payload())

    @app.get("/metrics")
    def metrics():
        return metrics_endpoint()

    return app


# --- App ---
setup_logging()
app = create_app()
