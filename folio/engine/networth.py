from __future__ import annotations

from typing import Iterable

from .holdings import as_number, latest_holdings_by_asset
from .models import CATEGORIES, Asset, Holding, NetWorth


def empty_breakdown() -> dict[str, float]:
    return {category: 0.0 for category in CATEGORIES}


def net_worth_by_category(assets: Iterable[Asset], holdings: Iterable[Holding]) -> NetWorth:
    latest = latest_holdings_by_asset(holdings)
    category_by_asset = {a.id: a.category for a in assets}

    breakdown = empty_breakdown()
    for h in latest.values():
        category = category_by_asset.get(h.asset_id, "other")
        if category not in breakdown:
            category = "other"
        breakdown[category] += as_number(h.value)

    total = 0.0
    for category in CATEGORIES:
        total += breakdown[category]
    return NetWorth(total=total, breakdown=breakdown)
