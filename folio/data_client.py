"""
Upstream quote source for Colombo Stock Exchange equities.

Returns one of:
  QuoteFetched(Quote(symbol="JKH", last_traded_price=20.5, previous_close=20.1))
  FetchFailed(reason="...")

Notes / Pitfalls:
- cse.lk endpoints are unofficial -> can rate-limit, time out or change shape.
- Nothing here raises for upstream trouble: network errors, non-2xx, timeouts,
  non-JSON bodies and payloads without a price all collapse into FetchFailed.
- The cache key is the bare symbol; the board suffix (".N0000") is only added
  on the wire.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

import httpx

from folio.models import FetchFailed, FetchResult, QuoteFetched
from folio.validator import validate_quote

logger = logging.getLogger(__name__)

_HEADERS = {
    "accept": "application/json, text/plain, */*",
    "content-type": "application/x-www-form-urlencoded; charset=UTF-8",
}


class QuoteSource(Protocol):
    async def fetch_quote(self, symbol: str) -> FetchResult: ...


def upstream_symbol(symbol: str, suffix: str = ".N0000") -> str:
    """JKH -> JKH.N0000; symbols that already carry a board suffix pass through."""
    sym = symbol.upper()
    return sym if "." in sym or not suffix else f"{sym}{suffix}"


def normalize_cse_quote(resp: Any, symbol: str) -> FetchResult:
    """
    Convert a companyInfoSummery response into a fetch result.
    We expect:
      resp["reqSymbolInfo"] -> dict with lastTradedPrice / previousClose
    """
    info = resp.get("reqSymbolInfo") if isinstance(resp, dict) else None
    if not isinstance(info, dict):
        return FetchFailed(reason="malformed payload: missing reqSymbolInfo")
    quote = validate_quote(info, symbol)
    if quote is None:
        return FetchFailed(reason="malformed payload: no usable price")
    return QuoteFetched(quote=quote)


class CseQuoteSource:
    def __init__(
        self,
        url: str,
        *,
        timeout_s: float = 5.0,
        suffix: str = ".N0000",
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.url = url
        self.timeout = httpx.Timeout(timeout_s)
        self.suffix = suffix
        self._transport = transport

    async def fetch_quote(self, symbol: str) -> FetchResult:
        wire_symbol = upstream_symbol(symbol, self.suffix)
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                r = await client.post(self.url, data={"symbol": wire_symbol}, headers=_HEADERS)
                r.raise_for_status()
                body = r.json()
        except httpx.TimeoutException:
            return FetchFailed(reason=f"timeout after {self.timeout.read}s")
        except httpx.HTTPStatusError as e:
            return FetchFailed(reason=f"http {e.response.status_code}")
        except httpx.RequestError as e:
            return FetchFailed(reason=f"network error: {e.__class__.__name__}")
        except ValueError:
            # r.json() on a non-JSON body
            return FetchFailed(reason="malformed payload: not json")

        result = normalize_cse_quote(body, symbol)
        if isinstance(result, FetchFailed):
            logger.debug("cse quote for %s rejected: %s", wire_symbol, result.reason)
        return result
