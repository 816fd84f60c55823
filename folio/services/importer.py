"""CSV import run: parse, then persist assets and holdings in one transaction."""

from __future__ import annotations

import sqlite3
import time

import structlog

from ..engine.csv_import import parse_portfolio_csv
from ..engine.models import PortfolioRow
from ..store import portfolio
from ..store.strategies import get_strategy

log = structlog.get_logger()

PREVIEW_LIMIT = 50


class ImportRejected(ValueError):
    pass


def preview_csv(text: str, default_as_of: str) -> dict:
    rows = parse_portfolio_csv(text, default_as_of)
    return {"row_count": len(rows), "rows": rows[:PREVIEW_LIMIT]}


def asset_key(row: PortfolioRow) -> str:
    return f"{row.category}::{row.name}"


def import_csv(
    conn: sqlite3.Connection,
    strategy_id: str,
    owner_uid: str,
    text: str,
    default_as_of: str,
    *,
    source: str = "kubera",
    match_existing: bool = True,
) -> dict:
    started = time.monotonic()
    if not get_strategy(conn, strategy_id):
        raise LookupError(f"strategy not found: {strategy_id}")
    rows = parse_portfolio_csv(text, default_as_of)
    if not rows:
        raise ImportRejected("No rows parsed. Check CSV format.")
    log.info("csv_import_started", strategy_id=strategy_id, rows=len(rows), source=source)

    created = matched = 0
    asset_ids: dict[str, str] = {}
    conn.execute("BEGIN")
    try:
        run_id = portfolio.create_import_run(
            conn,
            strategy_id,
            owner_uid,
            source=source,
            row_count=len(rows),
            notes=f"asOf={default_as_of}",
        )
        for row in rows:
            key = asset_key(row)
            asset_id = asset_ids.get(key)
            if asset_id is None:
                existing = portfolio.find_asset(conn, strategy_id, row.category, row.name) if match_existing else None
                if existing:
                    asset_id = existing["id"]
                    matched += 1
                else:
                    asset_id = portfolio.upsert_asset(
                        conn, strategy_id, owner_uid, name=row.name, category=row.category, notes=""
                    )
                    created += 1
                asset_ids[key] = asset_id
            portfolio.create_holding(
                conn,
                strategy_id,
                owner_uid,
                asset_id=asset_id,
                as_of=row.as_of,
                value=row.value,
                source=source,
                strict_date=False,
            )
        conn.execute("COMMIT")
    except Exception as exc:
        conn.execute("ROLLBACK")
        log.error("csv_import_failed", strategy_id=strategy_id, err=str(exc))
        raise

    result = {
        "import_run_id": run_id,
        "row_count": len(rows),
        "assets_created": created,
        "assets_matched": matched,
        "holdings_created": len(rows),
    }
    log.info(
        "csv_import_finished",
        strategy_id=strategy_id,
        elapsed_sec=round(time.monotonic() - started, 3),
        **result,
    )
    return result
