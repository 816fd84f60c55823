from __future__ import annotations

import json
import sqlite3

from ..engine.csv_import import normalize_category
from ..engine.models import Asset, Holding, PortfolioSnapshot
from ..utils import is_iso_date, new_id, now_utc_iso
from .strategies import get_strategy, to_engine_strategy

_ASSET_COLS = "id, strategy_id, owner_uid, name, category, bucket_id, notes, created_at_utc, updated_at_utc"
_HOLDING_COLS = "id, strategy_id, owner_uid, asset_id, as_of, value, source, created_at_utc"


def _row_to_asset(row) -> dict:
    return {
        "id": row[0],
        "strategy_id": row[1],
        "owner_uid": row[2],
        "name": row[3],
        "category": row[4],
        "bucket_id": row[5] or None,
        "notes": row[6] or "",
        "created_at_utc": row[7],
        "updated_at_utc": row[8],
    }


def _row_to_holding(row) -> dict:
    return {
        "id": row[0],
        "strategy_id": row[1],
        "owner_uid": row[2],
        "asset_id": row[3],
        "as_of": row[4],
        "value": row[5],
        "source": row[6] or "",
        "created_at_utc": row[7],
    }


# ---------- assets ----------

def list_assets(conn: sqlite3.Connection, strategy_id: str) -> list[dict]:
    rows = conn.execute(
        f"SELECT {_ASSET_COLS} FROM assets WHERE strategy_id=? ORDER BY updated_at_utc DESC, id ASC",
        (strategy_id,),
    ).fetchall()
    return [_row_to_asset(r) for r in rows]


def get_asset(conn: sqlite3.Connection, asset_id: str, strategy_id: str | None = None) -> dict | None:
    row = conn.execute(f"SELECT {_ASSET_COLS} FROM assets WHERE id=?", (asset_id,)).fetchone()
    if not row:
        return None
    asset = _row_to_asset(row)
    if strategy_id is not None and asset["strategy_id"] != strategy_id:
        return None
    return asset


def find_asset(conn: sqlite3.Connection, strategy_id: str, category: str, name: str) -> dict | None:
    row = conn.execute(
        f"SELECT {_ASSET_COLS} FROM assets WHERE strategy_id=? AND category=? AND name=? ORDER BY created_at_utc ASC LIMIT 1",
        (strategy_id, category, name),
    ).fetchone()
    return _row_to_asset(row) if row else None


def upsert_asset(
    conn: sqlite3.Connection,
    strategy_id: str,
    owner_uid: str,
    *,
    name: str,
    category: str,
    notes: str = "",
    asset_id: str | None = None,
) -> str:
    name = (name or "").strip()
    if not name:
        raise ValueError("Asset name is required.")
    category = normalize_category(category)
    now = now_utc_iso()
    if asset_id:
        cur = conn.execute(
            "UPDATE assets SET owner_uid=?, name=?, category=?, notes=?, updated_at_utc=? WHERE id=? AND strategy_id=?",
            (owner_uid, name, category, notes or "", now, asset_id, strategy_id),
        )
        if cur.rowcount == 0:
            raise LookupError(f"asset not found: {asset_id}")
        return asset_id
    asset_id = new_id()
    conn.execute(
        f"INSERT INTO assets({_ASSET_COLS}) VALUES(?,?,?,?,?,?,?,?,?)",
        (asset_id, strategy_id, owner_uid, name, category, None, notes or "", now, now),
    )
    return asset_id


def assign_bucket(conn: sqlite3.Connection, strategy_id: str, asset_id: str, bucket_id: str | None) -> dict:
    strategy = get_strategy(conn, strategy_id)
    if not strategy:
        raise LookupError(f"strategy not found: {strategy_id}")
    if not get_asset(conn, asset_id, strategy_id):
        raise LookupError(f"asset not found: {asset_id}")
    bucket_id = bucket_id or None
    if bucket_id is not None and bucket_id not in {b["id"] for b in strategy["buckets"]}:
        raise ValueError(f"Unknown bucket for this strategy: {bucket_id}")
    conn.execute(
        "UPDATE assets SET bucket_id=?, updated_at_utc=? WHERE id=?",
        (bucket_id, now_utc_iso(), asset_id),
    )
    return get_asset(conn, asset_id)


# ---------- holdings ----------

def list_holdings(conn: sqlite3.Connection, strategy_id: str) -> list[dict]:
    rows = conn.execute(
        f"SELECT {_HOLDING_COLS} FROM holdings WHERE strategy_id=? ORDER BY as_of DESC, seq DESC",
        (strategy_id,),
    ).fetchall()
    return [_row_to_holding(r) for r in rows]


def create_holding(
    conn: sqlite3.Connection,
    strategy_id: str,
    owner_uid: str,
    *,
    asset_id: str,
    as_of: str,
    value: float,
    source: str = "",
    strict_date: bool = True,
) -> str:
    if strict_date and not is_iso_date(as_of):
        raise ValueError("as_of must be YYYY-MM-DD")
    if not get_asset(conn, asset_id, strategy_id):
        raise LookupError(f"asset not found: {asset_id}")
    holding_id = new_id()
    conn.execute(
        f"INSERT INTO holdings({_HOLDING_COLS}) VALUES(?,?,?,?,?,?,?,?)",
        (holding_id, strategy_id, owner_uid, asset_id, as_of, value, source or "", now_utc_iso()),
    )
    return holding_id


# ---------- import runs ----------

def create_import_run(
    conn: sqlite3.Connection,
    strategy_id: str,
    owner_uid: str,
    *,
    source: str,
    row_count: int = 0,
    notes: str = "",
) -> str:
    run_id = new_id()
    conn.execute(
        """
        INSERT INTO import_runs(id, strategy_id, owner_uid, source, row_count, notes, created_at_utc)
        VALUES(?,?,?,?,?,?,?)
        """,
        (run_id, strategy_id, owner_uid, source, int(row_count or 0), notes or "", now_utc_iso()),
    )
    return run_id


def list_import_runs(conn: sqlite3.Connection, strategy_id: str) -> list[dict]:
    rows = conn.execute(
        """
        SELECT id, strategy_id, source, row_count, notes, created_at_utc
        FROM import_runs WHERE strategy_id=? ORDER BY created_at_utc DESC
        """,
        (strategy_id,),
    ).fetchall()
    return [
        {
            "id": r[0],
            "strategy_id": r[1],
            "source": r[2],
            "row_count": r[3],
            "notes": r[4],
            "created_at_utc": r[5],
        }
        for r in rows
    ]


# ---------- weekly reports ----------

def create_report(conn: sqlite3.Connection, strategy_id: str, owner_uid: str, report: dict) -> str:
    report_id = new_id()
    conn.execute(
        """
        INSERT INTO reports(
          id, strategy_id, owner_uid, start_date, end_date, net_worth,
          breakdown_json, drift_summary, notes, created_at_utc
        ) VALUES(?,?,?,?,?,?,?,?,?,?)
        """,
        (
            report_id, strategy_id, owner_uid, report["start_date"], report["end_date"],
            float(report["net_worth"]), json.dumps(report["breakdown"]),
            report.get("drift_summary") or "", report.get("notes") or "", now_utc_iso(),
        ),
    )
    return report_id


def list_reports(conn: sqlite3.Connection, strategy_id: str) -> list[dict]:
    rows = conn.execute(
        """
        SELECT id, strategy_id, start_date, end_date, net_worth, breakdown_json, drift_summary, notes, created_at_utc
        FROM reports WHERE strategy_id=? ORDER BY created_at_utc DESC
        """,
        (strategy_id,),
    ).fetchall()
    return [
        {
            "id": r[0],
            "strategy_id": r[1],
            "start_date": r[2],
            "end_date": r[3],
            "net_worth": r[4],
            "breakdown": json.loads(r[5]),
            "drift_summary": r[6],
            "notes": r[7],
            "created_at_utc": r[8],
        }
        for r in rows
    ]


# ---------- snapshot ----------

def load_snapshot(conn: sqlite3.Connection, strategy_id: str) -> PortfolioSnapshot | None:
    strategy = get_strategy(conn, strategy_id)
    if not strategy:
        return None
    assets = tuple(
        Asset(
            id=a["id"],
            strategy_id=a["strategy_id"],
            name=a["name"],
            category=a["category"],
            bucket_id=a["bucket_id"],
            notes=a["notes"],
        )
        for a in list_assets(conn, strategy_id)
    )
    holdings = tuple(
        Holding(id=h["id"], asset_id=h["asset_id"], as_of=h["as_of"], value=h["value"], source=h["source"])
        for h in list_holdings(conn, strategy_id)
    )
    return PortfolioSnapshot(strategy=to_engine_strategy(strategy), assets=assets, holdings=holdings)
