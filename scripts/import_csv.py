#!/usr/bin/env python3
"""
Import a portfolio CSV export into a strategy from the command line.

Usage:
    python scripts/import_csv.py <strategy_id> <owner_email> export.csv
    python scripts/import_csv.py <strategy_id> <owner_email> export.csv --as-of 2024-06-30
    python scripts/import_csv.py <strategy_id> <owner_email> export.csv --dry-run   # parse only
"""
from pathlib import Path
import os
import sys

# Ensure repo root is on sys.path and is the working directory.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
os.chdir(ROOT)

from folio.config import settings
from folio.db import Database
from folio.engine.csv_import import CsvHeaderError
from folio.logging import setup_logging
from folio.services.importer import ImportRejected, import_csv, preview_csv
from folio.store.strategies import get_strategy
from folio.store.users import get_user_by_email
from folio.utils import today_local_iso


def main() -> int:
    import argparse
    p = argparse.ArgumentParser(description="Import a name,category,value[,asOf] CSV into a strategy.")
    p.add_argument("strategy_id")
    p.add_argument("owner_email")
    p.add_argument("csv_path")
    p.add_argument("--as-of", default=None, help="Date for rows without asOf (default: today in LOCAL_TZ)")
    p.add_argument("--source", default=settings.default_import_source)
    p.add_argument("--dry-run", action="store_true", help="Parse and print rows without saving")
    args = p.parse_args()

    setup_logging(settings)
    as_of = args.as_of or today_local_iso(settings.local_tz)
    text = Path(args.csv_path).read_text(encoding="utf-8-sig")

    if args.dry_run:
        try:
            preview = preview_csv(text, as_of)
        except CsvHeaderError as e:
            print(e)
            return 1
        print(f"Parsed {preview['row_count']} rows")
        for row in preview["rows"]:
            print(f"  {row.as_of}  {row.category:<10} {row.value:>14,.2f}  {row.name}")
        return 0

    conn = Database(settings.db_path).connect()
    try:
        user = get_user_by_email(conn, args.owner_email.strip().lower())
        if not user:
            print("No user with email", args.owner_email)
            return 1
        if not get_strategy(conn, args.strategy_id, owner_uid=user["uid"]):
            print("Strategy not found for that user:", args.strategy_id)
            return 1
        try:
            result = import_csv(conn, args.strategy_id, user["uid"], text, as_of, source=args.source)
        except (CsvHeaderError, ImportRejected) as e:
            print(e)
            return 1
    finally:
        conn.close()

    print(
        f"Imported {result['row_count']} rows "
        f"({result['assets_created']} new assets, {result['assets_matched']} matched) "
        f"run={result['import_run_id']}"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
