"""SQLite database layer — durable key-value store and daemon health log.

Production hardening:
- Thread-safe via a dedicated lock (SQLite check_same_thread=False is not enough)
- WAL journal for concurrent reads from the CLI while the daemon writes
- Schema versioning for future migrations
- Context-manager protocol for clean resource handling
- Parameterized queries only
"""

import sqlite3
import logging
import threading
import time
from pathlib import Path

from lessismore.config import DB_PATH

log = logging.getLogger(__name__)

SCHEMA_VERSION = 1

_VALID_TABLES = frozenset({"kv_store", "daemon_health"})

_SCHEMA = """
-- Schema version tracking
CREATE TABLE IF NOT EXISTS schema_meta (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);
INSERT OR IGNORE INTO schema_meta (key, value) VALUES ('version', '1');

CREATE TABLE IF NOT EXISTS kv_store (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at REAL NOT NULL
);

CREATE TABLE IF NOT EXISTS daemon_health (
    id INTEGER PRIMARY KEY,
    timestamp REAL NOT NULL,
    event_type TEXT,
    details TEXT
);
CREATE INDEX IF NOT EXISTS idx_health_ts ON daemon_health(timestamp);
"""


class Database:
    """Thread-safe SQLite wrapper used as the ledgers' durable store.

    Usage:
        db = Database()
        db.open()
        ...
        db.close()

    Or as a context manager:
        with Database() as db:
            ...
    """

    def __init__(self, path: Path | None = None):
        self.path = path or DB_PATH
        self._conn: sqlite3.Connection | None = None
        self._lock = threading.Lock()

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    # ── lifecycle ───────────────────────────────────────────────────────

    def open(self) -> None:
        """Open the database, apply pragmas, and ensure schema exists."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(
            str(self.path),
            check_same_thread=False,
            timeout=10.0,
        )
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.execute("PRAGMA synchronous=NORMAL")
        self._conn.execute("PRAGMA busy_timeout=5000")
        self._conn.executescript(_SCHEMA)
        self._conn.commit()
        log.info("database opened at %s (schema v%d)", self.path, SCHEMA_VERSION)

    def close(self) -> None:
        """Close the database connection safely."""
        with self._lock:
            if self._conn:
                try:
                    self._conn.execute("PRAGMA optimize")
                    self._conn.close()
                except sqlite3.Error:
                    log.exception("error during database close")
                finally:
                    self._conn = None
                    log.info("database closed")

    def _ensure_conn(self) -> sqlite3.Connection:
        """Return the active connection, raising if closed."""
        if self._conn is None:
            raise RuntimeError("database is not open — call .open() first")
        return self._conn

    # ── key-value ───────────────────────────────────────────────────────

    def get(self, key: str) -> str | None:
        """Return the stored value for key, or None if absent."""
        conn = self._ensure_conn()
        with self._lock:
            cur = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,))
            row = cur.fetchone()
        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        """Upsert a value."""
        conn = self._ensure_conn()
        with self._lock:
            with conn:
                conn.execute(
                    """INSERT INTO kv_store (key, value, updated_at)
                       VALUES (?, ?, ?)
                       ON CONFLICT(key) DO UPDATE
                       SET value = excluded.value,
                           updated_at = excluded.updated_at""",
                    (key, value, time.time()),
                )

    def delete(self, key: str) -> None:
        conn = self._ensure_conn()
        with self._lock:
            with conn:
                conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))

    def get_bool(self, key: str) -> bool:
        return self.get(key) == "1"

    def set_bool(self, key: str, value: bool) -> None:
        self.set(key, "1" if value else "0")

    # ── health ──────────────────────────────────────────────────────────

    def log_health(self, ts: float, event_type: str, details: str = "") -> None:
        """Record a daemon health event."""
        conn = self._ensure_conn()
        with self._lock:
            with conn:
                conn.execute(
                    "INSERT INTO daemon_health (timestamp, event_type, details) VALUES (?, ?, ?)",
                    (ts, event_type, details),
                )

    # ── reads (for verification / debugging) ────────────────────────────

    def count(self, table: str) -> int:
        """Return the row count for a table."""
        if table not in _VALID_TABLES:
            raise ValueError(f"unknown table: {table!r}")
        conn = self._ensure_conn()
        with self._lock:
            cur = conn.execute(f"SELECT COUNT(*) FROM {table}")
            return cur.fetchone()[0]
