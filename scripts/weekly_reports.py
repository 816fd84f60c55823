#!/usr/bin/env python3
"""
Generate a weekly report for every strategy (same job the scheduler runs).

Usage:
    python scripts/weekly_reports.py
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
from folio.logging import setup_logging
from folio.services.reporting import generate_all_reports

if __name__ == '__main__':
    setup_logging(settings)
    conn = Database(settings.db_path).connect()
    try:
        count = generate_all_reports(conn, settings=settings)
    finally:
        conn.close()
    print('Reports written:', count)
