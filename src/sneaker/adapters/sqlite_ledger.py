"""SQLite duplicate ledger adapter.

Implements the core LedgerPort using a simple SQLite database. The composite
primary key makes ``INSERT OR IGNORE`` the atomic check-and-insert, so no
extra locking is needed across threads or processes.
"""

from __future__ import annotations

import sqlite3
from datetime import date, datetime, timezone
from typing import Set

from sneaker.core.dedup import parse_day_key
from sneaker.core.errors import LedgerIOError


class SQLiteLedger:
    """Thin SQLite wrapper that satisfies the LedgerPort contract."""

    def __init__(self, db_path: str, lock_timeout: float = 5.0) -> None:
        self._db_path = db_path
        self._lock_timeout = lock_timeout

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path, timeout=self._lock_timeout)
        conn.row_factory = sqlite3.Row
        return conn

    def init_db(self) -> None:
        """Create the ledger table if it does not exist.

        Fields:
        - day_key: ``DD.MM.YYYY`` partition of the ledger
        - fingerprint: exception fingerprint recorded that day
        - first_seen: UTC timestamp of first observation
        """

        try:
            with self._connect() as conn:
                conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS duplicates (
                        day_key TEXT NOT NULL,
                        fingerprint TEXT NOT NULL,
                        first_seen TIMESTAMP NOT NULL,
                        PRIMARY KEY (day_key, fingerprint)
                    )
                    """
                )
        except sqlite3.Error as exc:
            raise LedgerIOError(f"Failed to initialize ledger at {self._db_path}: {exc}") from exc

    def get(self, day_key: str) -> Set[str]:
        """Return all fingerprints recorded for a day."""

        try:
            with self._connect() as conn:
                rows = conn.execute(
                    "SELECT fingerprint FROM duplicates WHERE day_key = ?",
                    (day_key,),
                ).fetchall()
        except sqlite3.Error as exc:
            raise LedgerIOError(f"Failed to read ledger day {day_key}: {exc}") from exc
        return {row["fingerprint"] for row in rows}

    def append(self, day_key: str, fingerprint: str) -> None:
        """Insert a fingerprint if it does not exist."""

        self.add_if_absent(day_key, fingerprint)

    def add_if_absent(self, day_key: str, fingerprint: str) -> bool:
        """Insert a fingerprint and return True if this call created it."""

        now = datetime.now(timezone.utc)
        try:
            with self._connect() as conn:
                cur = conn.execute(
                    """
                    INSERT OR IGNORE INTO duplicates (day_key, fingerprint, first_seen)
                    VALUES (?, ?, ?)
                    """,
                    (day_key, fingerprint, now.isoformat()),
                )
                return cur.rowcount == 1
        except sqlite3.Error as exc:
            raise LedgerIOError(f"Failed to record fingerprint for {day_key}: {exc}") from exc

    def prune(self, before: date) -> int:
        """Delete day records older than ``before`` and return how many were removed.

        Days are compared by their ``day_key`` so both ledger backends prune
        the same calendar days.
        """

        try:
            with self._connect() as conn:
                rows = conn.execute("SELECT DISTINCT day_key FROM duplicates").fetchall()
                expired = []
                for row in rows:
                    try:
                        day = parse_day_key(row["day_key"])
                    except ValueError:
                        continue
                    if day < before:
                        expired.append(row["day_key"])
                conn.executemany(
                    "DELETE FROM duplicates WHERE day_key = ?",
                    [(key,) for key in expired],
                )
                return len(expired)
        except sqlite3.Error as exc:
            raise LedgerIOError(f"Failed to prune ledger: {exc}") from exc
