from __future__ import annotations

import math
from typing import Any

from folio.models import Quote


def _parse_price(val: Any) -> float | None:
    """Convert an upstream price field into a positive float, or None if unusable."""
    if val is None or isinstance(val, bool):
        return None
    if isinstance(val, str):
        val = val.replace(",", "").strip()
        if not val:
            return None
    try:
        f = float(val)
    except (TypeError, ValueError):
        return None
    if math.isnan(f) or math.isinf(f) or f <= 0:
        return None
    return f


def validate_quote(info: dict[str, Any], symbol: str) -> Quote | None:
    """Check an upstream quote record and return a Quote, or None if it has no usable price."""
    if not isinstance(info, dict):
        return None
    last = _parse_price(info.get("lastTradedPrice"))
    prev = _parse_price(info.get("previousClose"))
    if last is None and prev is None:
        return None
    return Quote(symbol=symbol.upper(), last_traded_price=last, previous_close=prev)
