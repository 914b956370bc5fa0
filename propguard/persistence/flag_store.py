"""Notification flag persistence with compare-and-set semantics."""

import sqlite3
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from ..logging import get_logger

from ..errors import NotificationStoreUnavailableError, PersistenceError


@dataclass(frozen=True)
class FlagKey:
    """Identity of a notification flag."""
    account_id: str
    metric_type: str
    threshold: float

    @classmethod
    def of(cls, account_id: str, metric_type: str, threshold: float) -> "FlagKey":
        return cls(str(account_id), str(metric_type), float(threshold))


@dataclass
class StoredFlag:
    """Stored flag with metadata."""
    account_id: str
    metric_type: str
    threshold: float
    notified: bool
    updated_at: str


class NotificationFlagStore(ABC):
    """
    Key-value store for per-threshold "already notified" flags.

    ``compare_and_set`` must be atomic: among any number of concurrent callers
    that expect the same current value, exactly one succeeds.
    """

    name = "flag_store"

    @abstractmethod
    def get(self, account_id: str, metric_type: str, threshold: float) -> bool:
        """Return the flag value; missing flags read as ``False``."""

    @abstractmethod
    def compare_and_set(
        self,
        account_id: str,
        metric_type: str,
        threshold: float,
        expected: bool,
        new: bool
    ) -> bool:
        """
        Set the flag to ``new`` only if it currently equals ``expected``.

        Returns:
            True if this call performed the update

        Raises:
            NotificationStoreUnavailableError: If the store cannot be reached
            PersistenceError: If the store is reachable but rejects the write
        """

    def health_check(self) -> bool:
        return True


class InMemoryFlagStore(NotificationFlagStore):
    """Lock-protected in-process flag store."""

    name = "memory"

    def __init__(self):
        self._flags: dict[FlagKey, bool] = {}
        self._lock = threading.Lock()

    def get(self, account_id: str, metric_type: str, threshold: float) -> bool:
        with self._lock:
            return self._flags.get(FlagKey.of(account_id, metric_type, threshold), False)

    def compare_and_set(
        self,
        account_id: str,
        metric_type: str,
        threshold: float,
        expected: bool,
        new: bool
    ) -> bool:
        key = FlagKey.of(account_id, metric_type, threshold)
        with self._lock:
            if self._flags.get(key, False) != expected:
                return False
            self._flags[key] = new
            return True

    def snapshot(self) -> dict[FlagKey, bool]:
        """Copy of all flags."""
        with self._lock:
            return dict(self._flags)


class SQLiteFlagStore(NotificationFlagStore):
    """SQLite-based flag store shared by every session observing an account."""

    name = "sqlite"

    def __init__(self, db_path: str = "notification_flags.db"):
        self.db_path = Path(db_path)
        self.logger = get_logger(__name__)
        self._lock = threading.Lock()

        self._init_database()

    def _init_database(self) -> None:
        """Initialize database schema."""
        with self._get_connection() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS notification_flags (
                    account_id TEXT NOT NULL,
                    metric_type TEXT NOT NULL,
                    threshold REAL NOT NULL,
                    notified INTEGER NOT NULL DEFAULT 0,
                    updated_at TEXT NOT NULL,
                    PRIMARY KEY (account_id, metric_type, threshold)
                )
            """)

            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_flags_account_id ON notification_flags(account_id)
            """)

    @contextmanager
    def _get_connection(self):
        """Get an autocommit connection; transactions are opened explicitly."""
        conn = None
        try:
            conn = sqlite3.connect(self.db_path, timeout=30.0, isolation_level=None)
            conn.row_factory = sqlite3.Row
            yield conn
        except sqlite3.IntegrityError as e:
            if conn is not None and conn.in_transaction:
                conn.execute("ROLLBACK")
            self.logger.error("Flag store constraint violation", db_path=str(self.db_path), error=str(e))
            raise PersistenceError(
                f"Flag store rejected write: {e}", operation="write", target=str(self.db_path)
            ) from e
        except sqlite3.Error as e:
            if conn is not None and conn.in_transaction:
                conn.execute("ROLLBACK")
            self.logger.error("Flag store database error", db_path=str(self.db_path), error=str(e))
            raise NotificationStoreUnavailableError(
                f"Flag store unavailable: {e}", store=str(self.db_path)
            ) from e
        finally:
            if conn is not None:
                conn.close()

    def get(self, account_id: str, metric_type: str, threshold: float) -> bool:
        key = FlagKey.of(account_id, metric_type, threshold)
        with self._get_connection() as conn:
            row = conn.execute("""
                SELECT notified FROM notification_flags
                WHERE account_id = ? AND metric_type = ? AND threshold = ?
            """, (key.account_id, key.metric_type, key.threshold)).fetchone()

        return bool(row["notified"]) if row else False

    def compare_and_set(
        self,
        account_id: str,
        metric_type: str,
        threshold: float,
        expected: bool,
        new: bool
    ) -> bool:
        key = FlagKey.of(account_id, metric_type, threshold)
        now = datetime.now(timezone.utc).isoformat()

        with self._lock:
            with self._get_connection() as conn:
                # IMMEDIATE takes the write lock up front so concurrent
                # processes serialise on the conditional update below.
                conn.execute("BEGIN IMMEDIATE")

                conn.execute("""
                    INSERT OR IGNORE INTO notification_flags (
                        account_id, metric_type, threshold, notified, updated_at
                    ) VALUES (?, ?, ?, 0, ?)
                """, (key.account_id, key.metric_type, key.threshold, now))

                cursor = conn.execute("""
                    UPDATE notification_flags SET notified = ?, updated_at = ?
                    WHERE account_id = ? AND metric_type = ? AND threshold = ?
                      AND notified = ?
                """, (int(new), now, key.account_id, key.metric_type,
                      key.threshold, int(expected)))

                conn.execute("COMMIT")
                return cursor.rowcount == 1

    def get_flags(self, account_id: str) -> list[StoredFlag]:
        """Get every flag recorded for an account."""
        with self._get_connection() as conn:
            rows = conn.execute("""
                SELECT * FROM notification_flags WHERE account_id = ?
                ORDER BY metric_type, threshold
            """, (str(account_id),)).fetchall()

        return [self._row_to_stored_flag(row) for row in rows]

    def get_stats(self) -> dict[str, Any]:
        """Get flag statistics."""
        with self._get_connection() as conn:
            total = conn.execute("SELECT COUNT(*) FROM notification_flags").fetchone()[0]
            fired = conn.execute(
                "SELECT COUNT(*) FROM notification_flags WHERE notified = 1"
            ).fetchone()[0]
            accounts = conn.execute(
                "SELECT COUNT(DISTINCT account_id) FROM notification_flags"
            ).fetchone()[0]

        return {
            "total_flags": total,
            "fired_flags": fired,
            "accounts": accounts,
        }

    def health_check(self) -> bool:
        try:
            with self._get_connection() as conn:
                conn.execute("SELECT 1").fetchone()
            return True
        except NotificationStoreUnavailableError:
            return False

    def _row_to_stored_flag(self, row: sqlite3.Row) -> StoredFlag:
        """Convert database row to StoredFlag object."""
        return StoredFlag(
            account_id=row["account_id"],
            metric_type=row["metric_type"],
            threshold=row["threshold"],
            notified=bool(row["notified"]),
            updated_at=row["updated_at"],
        )


def create_flag_store(db_path: Optional[str] = None) -> NotificationFlagStore:
    """SQLite store when a path is given, otherwise an in-memory store."""
    if db_path:
        return SQLiteFlagStore(db_path)
    return InMemoryFlagStore()
