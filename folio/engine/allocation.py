"""Current value, share and drift per allocation bucket."""

from __future__ import annotations

from typing import Iterable

from .holdings import as_number, latest_holdings_by_asset
from .models import Allocation, AllocationRow, Asset, Holding, Strategy

OVERWEIGHT = "overweight"
UNDERWEIGHT = "underweight"
ON_TARGET = "on_target"

NOTABLE_DRIFT_PCT = 0.5


def compute_allocation(strategy: Strategy, assets: Iterable[Asset], holdings: Iterable[Holding]) -> Allocation:
    latest = latest_holdings_by_asset(holdings)
    asset_by_id = {a.id: a for a in assets}

    value_by_bucket: dict[str, float] = {}
    unassigned = 0.0
    for h in latest.values():
        asset = asset_by_id.get(h.asset_id)
        value = as_number(h.value)
        bucket_id = asset.bucket_id if asset else None
        if not bucket_id:
            unassigned += value
            continue
        value_by_bucket[bucket_id] = value_by_bucket.get(bucket_id, 0.0) + value

    total = 0.0
    for value in value_by_bucket.values():
        total += value
    total += unassigned

    rows = []
    for b in strategy.buckets:
        current_value = value_by_bucket.get(b.id, 0.0)
        current_percent = (current_value / total) * 100 if total > 0 else 0.0
        target_percent = as_number(b.percent)
        rows.append(
            AllocationRow(
                bucket_id=b.id,
                name=b.name,
                target_percent=target_percent,
                current_value=current_value,
                current_percent=current_percent,
                drift_percent=current_percent - target_percent,
            )
        )
    return Allocation(total=total, unassigned_value=unassigned, rows=rows)


def drift_status(drift_percent: float, threshold: float = NOTABLE_DRIFT_PCT) -> str:
    if drift_percent > threshold:
        return OVERWEIGHT
    if drift_percent < -threshold:
        return UNDERWEIGHT
    return ON_TARGET
