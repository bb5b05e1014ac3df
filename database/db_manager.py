'''
    File Name: db_manager.py
    Version: 3.0.0
    Date: 12/01/2026
    Author: Pablo Bartolomé Molina
'''

import sqlite3
from pathlib import Path
import logging
from typing import Iterable, List, Optional

import config

logger = logging.getLogger(__name__)


class DatabaseManager:
    """Local key-value string store backed by a single SQLite table.

    Values are opaque strings (the repositories keep JSON arrays in them).
    Writes are upserts, so the last write for a key wins.
    """

    def __init__(self, db_path: Path = None):
        # prefer explicit path, otherwise config value or sensible default
        if db_path is not None:
            self.db_path = Path(db_path)
        else:
            self.db_path = Path(getattr(config, "DATABASE_PATH", "")) or (config.BASE_DIR / "data" / "pocket_finance.db")

    def _connect(self):
        """Return a new sqlite3 connection to the configured DB path."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        return sqlite3.connect(str(self.db_path))

    def ensure_database(self) -> None:
        """
        Ensure the configured SQLite database file exists and initialize schema.
        Safe to call multiple times.
        """
        logger.debug("Ensuring database exists at %s", self.db_path)
        try:
            conn = self._connect()
            cur = conn.cursor()
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS storage (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                );
                """
            )
            conn.commit()
            conn.close()
            logger.debug("Storage table ready at %s", self.db_path)
        except Exception:
            logger.exception("Failed to create/initialize database at %s", self.db_path)
            raise

    # --- Key-value access ---
    def get(self, key: str) -> Optional[str]:
        """Return the value stored under `key`, or None if missing."""
        try:
            conn = self._connect()
            cur = conn.cursor()
            cur.execute("SELECT value FROM storage WHERE key = ?", (key,))
            row = cur.fetchone()
            conn.close()
            return row[0] if row else None
        except Exception:
            logger.exception("Failed reading key %s", key)
            return None

    def set(self, key: str, value: str) -> bool:
        """Store `value` under `key`, replacing any previous value. Returns True on success."""
        try:
            conn = self._connect()
            cur = conn.cursor()
            cur.execute(
                "INSERT INTO storage (key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                (key, str(value)),
            )
            conn.commit()
            conn.close()
            return True
        except Exception:
            logger.exception("Failed writing key %s", key)
            return False

    def remove(self, keys: Iterable[str]) -> int:
        """Delete the given keys. Returns the number of rows removed."""
        keys = list(keys)
        if not keys:
            return 0
        try:
            conn = self._connect()
            cur = conn.cursor()
            cur.executemany("DELETE FROM storage WHERE key = ?", [(k,) for k in keys])
            conn.commit()
            affected = cur.rowcount
            conn.close()
            return max(affected, 0)
        except Exception:
            logger.exception("Failed removing keys %s", keys)
            return 0

    def keys(self, prefix: str = "") -> List[str]:
        """List stored keys, optionally only those starting with `prefix`."""
        try:
            conn = self._connect()
            cur = conn.cursor()
            cur.execute("SELECT key FROM storage ORDER BY key")
            rows = cur.fetchall()
            conn.close()
            return [r[0] for r in rows if r[0].startswith(prefix)]
        except Exception:
            logger.exception("Failed listing keys")
            return []
