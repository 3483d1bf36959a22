"""
StudyOS Assistant — Local key-value storage.

Everything the assistant remembers lives in one SQLite table of
``key -> JSON text`` rows, the same contract a browser's local storage
offers: whole values are read and overwritten, never patched.

Per-user data is isolated by suffixing the logical key with the active
session identity (see ``resolve_key``).
"""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

logger = logging.getLogger(__name__)

# Process-wide keys, never namespaced.
CURRENT_USER_KEY = "currentUser"
ACCOUNTS_KEY = "accounts"


def resolve_key(key: str, identity: str | None) -> str:
    """Return the storage key for ``key`` under the given session identity.

    No identity means the shared/legacy namespace: the key is used as is.
    """
    return f"{key}_{identity}" if identity else key


class LocalStorage:
    """SQLite-backed string key-value store."""

    def __init__(self, db_path: str | None = None) -> None:
        if db_path is None:
            from studyos.config import settings
            db_path = settings.DATABASE_PATH

        self._db_path = db_path
        self._memory_conn: sqlite3.Connection | None = None
        if db_path == ":memory:":
            # Every sqlite3.connect(":memory:") is a fresh database; keep one.
            self._memory_conn = sqlite3.connect(db_path)
        else:
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        if self._memory_conn is not None:
            return self._memory_conn
        return sqlite3.connect(self._db_path)

    def _init_db(self) -> None:
        """Create the storage table if it doesn't exist."""
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS storage (
                    key   TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
            """)
        logger.debug("Storage table initialized at %s", self._db_path)

    def get_item(self, key: str) -> str | None:
        """Return the raw value stored under ``key``, or None."""
        with self._connect() as conn:
            row = conn.execute(
                "SELECT value FROM storage WHERE key = ?", (key,)
            ).fetchone()
        return None if row is None else row[0]

    def set_item(self, key: str, value: str) -> None:
        """Overwrite the value stored under ``key``."""
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO storage (key, value) VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value
                """,
                (key, value),
            )
        logger.debug("Stored key '%s' (%d bytes)", key, len(value))

    def remove_item(self, key: str) -> bool:
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM storage WHERE key = ?", (key,))
        return cursor.rowcount > 0

    def keys(self) -> list[str]:
        with self._connect() as conn:
            rows = conn.execute("SELECT key FROM storage ORDER BY key").fetchall()
        return [r[0] for r in rows]

    def clear(self) -> None:
        """Drop every key, including the session and account keys."""
        with self._connect() as conn:
            conn.execute("DELETE FROM storage")
        logger.info("Storage cleared at %s", self._db_path)

    def current_identity(self) -> str | None:
        """The logged-in identity, or None when nobody is logged in."""
        return self.get_item(CURRENT_USER_KEY) or None

    def user_key(self, key: str) -> str:
        """Namespace ``key`` with whoever is logged in right now."""
        return resolve_key(key, self.current_identity())
