from __future__ import annotations

import json
import sqlite3

from ..engine.buckets import validate_buckets
from ..engine.models import AllocationBucket, BucketValidation, Strategy
from ..utils import new_id, now_utc_iso

DEFAULT_BUCKETS = (("Safe", 50), ("Growth", 40), ("Asymmetric", 10))


class BucketsInvalid(ValueError):
    def __init__(self, validation: BucketValidation):
        super().__init__("\n".join(validation.errors))
        self.validation = validation


def default_buckets() -> list[dict]:
    return [{"id": new_id(), "name": name, "percent": percent} for name, percent in DEFAULT_BUCKETS]


def _load_buckets(raw: str | None) -> list[dict]:
    try:
        data = json.loads(raw or "[]")
    except json.JSONDecodeError:
        return []
    if not isinstance(data, list):
        return []
    out = []
    for item in data:
        if not isinstance(item, dict):
            continue
        out.append({
            "id": str(item.get("id") or ""),
            "name": item.get("name") if isinstance(item.get("name"), str) else "",
            "percent": item.get("percent"),
        })
    return out


def _row_to_strategy(row) -> dict:
    return {
        "id": row[0],
        "owner_uid": row[1],
        "name": row[2],
        "description": row[3] or "",
        "buckets": _load_buckets(row[4]),
        "created_at_utc": row[5],
        "updated_at_utc": row[6],
    }


_SELECT = (
    "SELECT id, owner_uid, name, description, buckets_json, created_at_utc, updated_at_utc FROM strategies"
)


def to_engine_strategy(strategy: dict) -> Strategy:
    return Strategy(
        id=strategy["id"],
        name=strategy["name"],
        description=strategy.get("description") or "",
        buckets=tuple(
            AllocationBucket(id=b["id"], name=b["name"], percent=b["percent"])
            for b in strategy.get("buckets") or []
        ),
    )


def list_strategies(conn: sqlite3.Connection, owner_uid: str) -> list[dict]:
    rows = conn.execute(
        f"{_SELECT} WHERE owner_uid=? ORDER BY updated_at_utc DESC",
        (owner_uid,),
    ).fetchall()
    return [_row_to_strategy(r) for r in rows]


def list_all_strategies(conn: sqlite3.Connection) -> list[dict]:
    rows = conn.execute(f"{_SELECT} ORDER BY created_at_utc ASC").fetchall()
    return [_row_to_strategy(r) for r in rows]


def get_strategy(conn: sqlite3.Connection, strategy_id: str, owner_uid: str | None = None) -> dict | None:
    row = conn.execute(f"{_SELECT} WHERE id=?", (strategy_id,)).fetchone()
    if not row:
        return None
    strategy = _row_to_strategy(row)
    if owner_uid is not None and strategy["owner_uid"] != owner_uid:
        return None
    return strategy


def create_strategy(conn: sqlite3.Connection, owner_uid: str, name: str, description: str = "") -> dict:
    name = (name or "").strip()
    if not name:
        raise ValueError("Strategy name is required.")
    strategy_id = new_id()
    now = now_utc_iso()
    conn.execute(
        """
        INSERT INTO strategies(id, owner_uid, name, description, buckets_json, created_at_utc, updated_at_utc)
        VALUES(?,?,?,?,?,?,?)
        """,
        (strategy_id, owner_uid, name, description or "", json.dumps(default_buckets()), now, now),
    )
    return get_strategy(conn, strategy_id)


def update_strategy(
    conn: sqlite3.Connection,
    strategy_id: str,
    *,
    name: str | None = None,
    description: str | None = None,
    buckets: list[dict] | None = None,
) -> dict | None:
    current = get_strategy(conn, strategy_id)
    if not current:
        return None
    if name is not None:
        name = name.strip()
        if not name:
            raise ValueError("Strategy name is required.")
        current["name"] = name
    if description is not None:
        current["description"] = description
    if buckets is not None:
        cleaned = [
            {"id": str(b.get("id") or new_id()), "name": b.get("name") or "", "percent": b.get("percent")}
            for b in buckets
        ]
        validation = validate_buckets(
            AllocationBucket(id=b["id"], name=b["name"], percent=b["percent"]) for b in cleaned
        )
        if not validation.ok:
            raise BucketsInvalid(validation)
        current["buckets"] = cleaned

    conn.execute("BEGIN")
    try:
        conn.execute(
            "UPDATE strategies SET name=?, description=?, buckets_json=?, updated_at_utc=? WHERE id=?",
            (current["name"], current["description"], json.dumps(current["buckets"]), now_utc_iso(), strategy_id),
        )
        if buckets is not None:
            _clear_stale_assignments(conn, strategy_id, {b["id"] for b in current["buckets"]})
        conn.execute("COMMIT")
    except Exception:
        conn.execute("ROLLBACK")
        raise
    return get_strategy(conn, strategy_id)


def _clear_stale_assignments(conn: sqlite3.Connection, strategy_id: str, bucket_ids: set[str]):
    rows = conn.execute(
        "SELECT id, bucket_id FROM assets WHERE strategy_id=? AND bucket_id IS NOT NULL",
        (strategy_id,),
    ).fetchall()
    stale = [asset_id for asset_id, bucket_id in rows if bucket_id not in bucket_ids]
    now = now_utc_iso()
    for asset_id in stale:
        conn.execute("UPDATE assets SET bucket_id=NULL, updated_at_utc=? WHERE id=?", (now, asset_id))


def delete_strategy(conn: sqlite3.Connection, strategy_id: str) -> bool:
    cur = conn.execute("DELETE FROM strategies WHERE id=?", (strategy_id,))
    return cur.rowcount > 0
