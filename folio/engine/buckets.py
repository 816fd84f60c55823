"""Structural checks for a strategy's allocation buckets."""

from __future__ import annotations

import math
from typing import Iterable

from .models import AllocationBucket, BucketValidation


def _is_finite_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _round2(value: float) -> float:
    return math.floor(value * 100 + 0.5) / 100


def format_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def validate_buckets(buckets: Iterable[AllocationBucket]) -> BucketValidation:
    buckets = list(buckets)
    errors: list[str] = []
    if not buckets:
        errors.append("Add at least 1 allocation bucket.")

    # Only finite percents are summed so the reported sum stays a plain number.
    total = 0
    for b in buckets:
        label = b.name or b.id
        if not (b.name or "").strip():
            errors.append("Bucket name cannot be empty.")
        finite = _is_finite_number(b.percent)
        if not finite:
            errors.append(f"Bucket percent must be a number ({label}).")
        numeric = isinstance(b.percent, (int, float)) and not isinstance(b.percent, bool)
        if numeric and b.percent < 0:
            errors.append(f"Bucket percent cannot be negative ({label}).")
        if finite:
            total += b.percent

    if _round2(total) != 100:
        errors.append(f"Bucket percents must sum to 100 (currently {format_number(total)}).")

    return BucketValidation(ok=not errors, errors=errors, sum=total)
