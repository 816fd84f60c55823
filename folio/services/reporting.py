from __future__ import annotations

import sqlite3

import structlog

from ..config import Settings, settings as default_settings
from ..engine.reports import build_weekly_report
from ..store import portfolio
from ..store.strategies import list_all_strategies
from ..utils import today_local_iso

log = structlog.get_logger()


def generate_report(
    conn: sqlite3.Connection,
    strategy_id: str,
    owner_uid: str,
    *,
    start_date: str | None = None,
    end_date: str | None = None,
    notes: str = "",
    settings: Settings | None = None,
) -> dict:
    settings = settings or default_settings
    snapshot = portfolio.load_snapshot(conn, strategy_id)
    if snapshot is None:
        raise LookupError(f"strategy not found: {strategy_id}")
    end_date = end_date or today_local_iso(settings.local_tz)
    start_date = start_date or end_date
    report = build_weekly_report(
        snapshot.strategy,
        snapshot.assets,
        snapshot.holdings,
        start_date,
        end_date,
        notes=notes,
        threshold=settings.drift_notable_pct,
    )
    report_id = portfolio.create_report(conn, strategy_id, owner_uid, report)
    log.info("weekly_report_created", strategy_id=strategy_id, report_id=report_id, net_worth=report["net_worth"])
    return {"id": report_id, "strategy_id": strategy_id, **report}


def generate_all_reports(conn: sqlite3.Connection, settings: Settings | None = None) -> int:
    count = 0
    for strategy in list_all_strategies(conn):
        try:
            generate_report(conn, strategy["id"], strategy["owner_uid"], settings=settings)
            count += 1
        except Exception as exc:
            log.error("weekly_report_failed", strategy_id=strategy["id"], err=str(exc))
    return count
