import sqlite3
import threading
from pathlib import Path

def get_conn(db_path: str) -> sqlite3.Connection:
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(db_path, isolation_level=None, check_same_thread=False)  # autocommit
    conn.execute("PRAGMA journal_mode=WAL;")
    conn.execute("PRAGMA foreign_keys=ON;")
    return conn

DDL = [
    # Accounts
    """
CREATE TABLE IF NOT EXISTS users (
  uid TEXT PRIMARY KEY,
  email TEXT NOT NULL UNIQUE,
  display_name TEXT NOT NULL DEFAULT '',
  password_hash TEXT NOT NULL,
  created_at_utc TEXT NOT NULL,
  last_login_at_utc TEXT
);
""",
    """
CREATE TABLE IF NOT EXISTS sessions (
  token TEXT PRIMARY KEY,
  uid TEXT NOT NULL REFERENCES users(uid) ON DELETE CASCADE,
  created_at_utc TEXT NOT NULL,
  expires_at_utc TEXT NOT NULL
);
""",
    "CREATE INDEX IF NOT EXISTS ix_sessions_uid ON sessions(uid);",

    # Strategies (buckets embedded as an ordered JSON array)
    """
CREATE TABLE IF NOT EXISTS strategies (
  id TEXT PRIMARY KEY,
  owner_uid TEXT NOT NULL REFERENCES users(uid) ON DELETE CASCADE,
  name TEXT NOT NULL,
  description TEXT NOT NULL DEFAULT '',
  buckets_json TEXT NOT NULL DEFAULT '[]',
  created_at_utc TEXT NOT NULL,
  updated_at_utc TEXT NOT NULL
);
""",
    "CREATE INDEX IF NOT EXISTS ix_strategies_owner_updated ON strategies(owner_uid, updated_at_utc DESC);",

    """
CREATE TABLE IF NOT EXISTS assets (
  id TEXT PRIMARY KEY,
  strategy_id TEXT NOT NULL REFERENCES strategies(id) ON DELETE CASCADE,
  owner_uid TEXT NOT NULL,
  name TEXT NOT NULL,
  category TEXT NOT NULL,   -- 'property'|'cash'|'brokerage'|'crypto'|'other'
  bucket_id TEXT,           -- NULL when unassigned
  notes TEXT NOT NULL DEFAULT '',
  created_at_utc TEXT NOT NULL,
  updated_at_utc TEXT NOT NULL
);
""",
    "CREATE INDEX IF NOT EXISTS ix_assets_strategy ON assets(strategy_id, updated_at_utc DESC);",

    # Point-in-time observations (append-only)
    """
CREATE TABLE IF NOT EXISTS holdings (
  seq INTEGER PRIMARY KEY AUTOINCREMENT,  -- insertion order, newest writes first on as_of ties
  id TEXT NOT NULL UNIQUE,
  strategy_id TEXT NOT NULL REFERENCES strategies(id) ON DELETE CASCADE,
  owner_uid TEXT NOT NULL,
  asset_id TEXT NOT NULL REFERENCES assets(id) ON DELETE CASCADE,
  as_of TEXT NOT NULL,      -- YYYY-MM-DD
  value REAL,
  source TEXT NOT NULL DEFAULT '',
  created_at_utc TEXT NOT NULL
);
""",
    "CREATE INDEX IF NOT EXISTS ix_holdings_strategy_asof ON holdings(strategy_id, as_of DESC);",

    """
CREATE TABLE IF NOT EXISTS import_runs (
  id TEXT PRIMARY KEY,
  strategy_id TEXT NOT NULL REFERENCES strategies(id) ON DELETE CASCADE,
  owner_uid TEXT NOT NULL,
  source TEXT NOT NULL,
  row_count INTEGER NOT NULL DEFAULT 0,
  notes TEXT NOT NULL DEFAULT '',
  created_at_utc TEXT NOT NULL
);
""",

    """
CREATE TABLE IF NOT EXISTS reports (
  id TEXT PRIMARY KEY,
  strategy_id TEXT NOT NULL REFERENCES strategies(id) ON DELETE CASCADE,
  owner_uid TEXT NOT NULL,
  start_date TEXT NOT NULL,
  end_date TEXT NOT NULL,
  net_worth REAL NOT NULL,
  breakdown_json TEXT NOT NULL,
  drift_summary TEXT NOT NULL DEFAULT '',
  notes TEXT NOT NULL DEFAULT '',
  created_at_utc TEXT NOT NULL
);
""",
    "CREATE INDEX IF NOT EXISTS ix_reports_strategy_created ON reports(strategy_id, created_at_utc DESC);",

    """
CREATE TABLE IF NOT EXISTS research_items (
  id TEXT PRIMARY KEY,
  owner_uid TEXT NOT NULL REFERENCES users(uid) ON DELETE CASCADE,
  title TEXT NOT NULL,
  url TEXT NOT NULL DEFAULT '',
  notes TEXT NOT NULL DEFAULT '',
  tags_json TEXT NOT NULL DEFAULT '[]',
  strategy_ids_json TEXT NOT NULL DEFAULT '[]',
  asset_ids_json TEXT NOT NULL DEFAULT '[]',
  created_at_utc TEXT NOT NULL,
  updated_at_utc TEXT NOT NULL
);
""",
    "CREATE INDEX IF NOT EXISTS ix_research_owner_updated ON research_items(owner_uid, updated_at_utc DESC);",
]

def migrate(conn: sqlite3.Connection):
    cur = conn.cursor()
    for stmt in DDL:
        cur.execute(stmt)
    conn.commit()


class Database:
    """Explicit handle for the SQLite file.

    The schema is migrated on the first ``connect()`` of each instance; later
    calls only open connections.
    """
    def __init__(self, db_path: str):
        self.db_path = db_path
        self.initialized = False
        self._init_lock = threading.Lock()

    def connect(self) -> sqlite3.Connection:
        conn = get_conn(self.db_path)
        if not self.initialized:
            with self._init_lock:
                if not self.initialized:
                    migrate(conn)
                    self.initialized = True
        return conn
