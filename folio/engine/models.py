"""Plain value types consumed and produced by the valuation engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

AssetCategory = Literal["property", "cash", "brokerage", "crypto", "other"]

CATEGORIES: tuple[str, ...] = ("property", "cash", "brokerage", "crypto", "other")


@dataclass(frozen=True)
class PortfolioRow:
    name: str
    category: AssetCategory
    value: float
    as_of: str


@dataclass(frozen=True)
class AllocationBucket:
    id: str
    name: str
    percent: Any  # 0..100; may be dirty when read back from storage


@dataclass(frozen=True)
class Strategy:
    id: str
    name: str
    buckets: tuple[AllocationBucket, ...] = ()
    description: str = ""


@dataclass(frozen=True)
class Asset:
    id: str
    strategy_id: str
    name: str
    category: AssetCategory
    bucket_id: str | None = None
    notes: str = ""


@dataclass(frozen=True)
class Holding:
    id: str
    asset_id: str
    as_of: str
    value: Any = None
    source: str = ""


@dataclass
class BucketValidation:
    ok: bool
    errors: list[str] = field(default_factory=list)
    sum: float = 0


@dataclass
class NetWorth:
    total: float
    breakdown: dict[str, float]


@dataclass
class AllocationRow:
    bucket_id: str
    name: str
    target_percent: float
    current_value: float
    current_percent: float
    drift_percent: float


@dataclass
class Allocation:
    total: float
    unassigned_value: float
    rows: list[AllocationRow] = field(default_factory=list)


@dataclass(frozen=True)
class PortfolioSnapshot:
    """Everything the engine needs for one strategy, read at one moment."""

    strategy: Strategy
    assets: tuple[Asset, ...]
    holdings: tuple[Holding, ...]
