# folio/observability.py
from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable

from fastapi import Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, Histogram, generate_latest

# ---- Prometheus metrics (low-cardinality labels) ----
REQUEST_COUNT = Counter(
    "folio_http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status"],
)

REQUEST_LATENCY = Histogram(
    "folio_http_request_duration_seconds",
    "HTTP request latency (seconds)",
    buckets=(0.005, 0.01, 0.02, 0.05, 0.1, 0.2, 0.5, 1.0, 2.5, 5.0),
)

# ---- Quote cache / resolver ----
QUOTE_RESOLUTIONS = Counter(
    "folio_quote_resolutions_total",
    "Quote resolutions by outcome",
    ["outcome"],  # live | cache_hit | stale_fallback | unavailable
)

UPSTREAM_FETCHES = Counter(
    "folio_upstream_fetches_total",
    "Upstream quote fetch attempts",
    ["result"],  # ok | failed
)

CACHE_EVICTIONS = Counter(
    "folio_quote_cache_evictions_total",
    "Entries removed from the quote cache",
    ["reason"],  # sweep | clear
)

CACHE_ENTRIES = Gauge(
    "folio_quote_cache_entries",
    "Entries currently held in the quote cache",
)


def metrics_endpoint():
    """Return Prometheus exposition format."""
    data = generate_latest()
    return Response(content=data, media_type=CONTENT_TYPE_LATEST)


# ---- Per-request timing + JSON request log ----
async def timing_middleware(request: Request, call_next: Callable):
    start = time.perf_counter()
    response = await call_next(request)
    elapsed = time.perf_counter() - start

    # route template keeps the label set small (/api/v1/quotes/{symbol})
    route = request.scope.get("route")
    path = getattr(route, "path", request.url.path)
    status = str(response.status_code)

    REQUEST_COUNT.labels(method=request.method, path=path, status=status).inc()
    REQUEST_LATENCY.observe(elapsed)

    logging.getLogger("request").info(
        json.dumps(
            {
                "method": request.method,
                "path": request.url.path,
                "status": status,
                "duration_s": round(elapsed, 6),
                "client": request.client.host if request.client else None,
            }
        )
    )
    return response
