"""Latest-observation reduction shared by the net-worth and allocation views."""

from __future__ import annotations

import math
from typing import Iterable

from .models import Holding


def as_number(value) -> float:
    """Coerce a stored value to a finite float; anything else counts as 0."""
    if value is None:
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def latest_holdings_by_asset(holdings: Iterable[Holding]) -> dict[str, Holding]:
    # Strictly greater as_of replaces; on equal dates the first one seen stays.
    latest: dict[str, Holding] = {}
    for h in holdings:
        prev = latest.get(h.asset_id)
        if prev is None or (h.as_of or "") > (prev.as_of or ""):
            latest[h.asset_id] = h
    return latest
