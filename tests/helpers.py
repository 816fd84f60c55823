import os
import tempfile

from folio.auth import sign_up
from folio.config import Settings
from folio.db import Database


def make_settings(tmpdir: str, **overrides) -> Settings:
    values = {
        "db_path": os.path.join(tmpdir, "folio.db"),
        "password_hash_rounds": 4,
        "local_tz": "UTC",
    }
    values.update(overrides)
    return Settings(**values)


class TempDatabase:
    """A migrated SQLite file in a throwaway directory."""

    def __init__(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.settings = make_settings(self.tmp.name)
        self.db = Database(self.settings.db_path)
        self.conn = self.db.connect()

    def add_user(self, email="owner@example.com", password="correct horse"):
        return sign_up(self.conn, email, password, settings=self.settings)

    def close(self):
        self.conn.close()
        self.tmp.cleanup()
