"""Weekly report payloads built from one portfolio snapshot."""

from __future__ import annotations

from typing import Iterable

from .allocation import NOTABLE_DRIFT_PCT, ON_TARGET, compute_allocation, drift_status
from .models import Allocation, Asset, Holding, Strategy
from .networth import net_worth_by_category


def summarize_drift(allocation: Allocation, threshold: float = NOTABLE_DRIFT_PCT) -> str:
    if allocation.total <= 0:
        return "No holdings yet."
    parts = []
    for row in allocation.rows:
        status = drift_status(row.drift_percent, threshold)
        if status == ON_TARGET:
            continue
        parts.append(f"{row.name} {row.drift_percent:+.1f}% {status}")
    if not parts:
        return "All buckets on target."
    return "; ".join(parts)


def build_weekly_report(
    strategy: Strategy,
    assets: Iterable[Asset],
    holdings: Iterable[Holding],
    start_date: str,
    end_date: str,
    notes: str = "",
    threshold: float = NOTABLE_DRIFT_PCT,
) -> dict:
    assets = list(assets)
    holdings = list(holdings)
    net_worth = net_worth_by_category(assets, holdings)
    allocation = compute_allocation(strategy, assets, holdings)
    return {
        "start_date": start_date,
        "end_date": end_date,
        "net_worth": net_worth.total,
        "breakdown": dict(net_worth.breakdown),
        "drift_summary": summarize_drift(allocation, threshold),
        "notes": notes,
    }
