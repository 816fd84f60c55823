from pathlib import Path
import os
import sys

# Ensure repo root is on sys.path and is the working directory.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
os.chdir(ROOT)

from folio.db import Database
from folio.config import settings

if __name__ == '__main__':
    conn = Database(settings.db_path).connect()
    try:
        strategy_count = conn.execute("SELECT COUNT(*) FROM strategies").fetchone()[0]
    finally:
        conn.close()
    print('DB ready at', settings.db_path, '| strategies:', strategy_count)
