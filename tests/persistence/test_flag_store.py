"""Tests for notification flag stores."""

import os
import shutil
import sqlite3
import tempfile
import threading
from unittest.mock import patch

import pytest

from propguard.errors import NotificationStoreUnavailableError, PersistenceError
from propguard.persistence import InMemoryFlagStore, SQLiteFlagStore, create_flag_store


class FlagStoreContract:
    """Behaviour shared by every flag store."""

    store = None

    def test_missing_flag_reads_false(self):
        assert self.store.get("acct", "daily", 50) is False

    def test_compare_and_set_from_armed(self):
        assert self.store.compare_and_set("acct", "daily", 50, False, True) is True
        assert self.store.get("acct", "daily", 50) is True

    def test_compare_and_set_rejects_stale_expectation(self):
        self.store.compare_and_set("acct", "daily", 50, False, True)

        assert self.store.compare_and_set("acct", "daily", 50, False, True) is False
        assert self.store.get("acct", "daily", 50) is True

    def test_reset_to_armed(self):
        self.store.compare_and_set("acct", "daily", 50, False, True)

        assert self.store.compare_and_set("acct", "daily", 50, True, False) is True
        assert self.store.get("acct", "daily", 50) is False

    def test_rearm_of_armed_flag_is_noop(self):
        assert self.store.compare_and_set("acct", "daily", 50, True, False) is False

    def test_keys_are_independent(self):
        self.store.compare_and_set("acct", "daily", 50, False, True)

        assert self.store.get("acct", "total", 50) is False
        assert self.store.get("acct", "daily", 75) is False
        assert self.store.get("other", "daily", 50) is False

    def test_int_and_float_thresholds_match(self):
        self.store.compare_and_set("acct", "daily", 50, False, True)
        assert self.store.get("acct", "daily", 50.0) is True

    def test_concurrent_compare_and_set_has_single_winner(self):
        thread_count = 16
        barrier = threading.Barrier(thread_count)
        wins = []
        lock = threading.Lock()

        def attempt():
            barrier.wait()
            won = self.store.compare_and_set("acct", "daily", 90, False, True)
            with lock:
                wins.append(won)

        threads = [threading.Thread(target=attempt) for _ in range(thread_count)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert wins.count(True) == 1

    def test_health_check(self):
        assert self.store.health_check() is True


class TestInMemoryFlagStore(FlagStoreContract):
    """Test InMemoryFlagStore."""

    def setup_method(self):
        self.store = InMemoryFlagStore()

    def test_snapshot(self):
        self.store.compare_and_set("acct", "daily", 50, False, True)
        snapshot = self.store.snapshot()

        assert len(snapshot) == 1
        assert list(snapshot.values()) == [True]


class TestSQLiteFlagStore(FlagStoreContract):
    """Test SQLiteFlagStore."""

    def setup_method(self):
        self.temp_dir = tempfile.mkdtemp()
        self.db_path = os.path.join(self.temp_dir, "test_flags.db")
        self.store = SQLiteFlagStore(self.db_path)

    def teardown_method(self):
        shutil.rmtree(self.temp_dir)

    def test_init_database(self):
        with sqlite3.connect(self.db_path) as conn:
            tables = conn.execute(
                "SELECT name FROM sqlite_master WHERE type='table' AND name='notification_flags'"
            ).fetchall()
        assert len(tables) == 1

    def test_flags_survive_new_store_instance(self):
        """A second store on the same file sees the same flags."""
        self.store.compare_and_set("acct", "total", 75, False, True)
        other = SQLiteFlagStore(self.db_path)

        assert other.get("acct", "total", 75) is True
        assert other.compare_and_set("acct", "total", 75, False, True) is False

    def test_get_flags_and_stats(self):
        self.store.compare_and_set("acct", "daily", 50, False, True)
        self.store.compare_and_set("acct", "daily", 75, True, False)

        flags = self.store.get_flags("acct")
        stats = self.store.get_stats()

        assert [(f.metric_type, f.threshold, f.notified) for f in flags] == [
            ("daily", 50.0, True),
            ("daily", 75.0, False),
        ]
        assert stats == {"total_flags": 2, "fired_flags": 1, "accounts": 1}

    def test_database_error_raises_unavailable(self):
        with patch("propguard.persistence.flag_store.sqlite3.connect",
                   side_effect=sqlite3.OperationalError("disk I/O error")):
            with pytest.raises(NotificationStoreUnavailableError) as exc_info:
                self.store.get("acct", "daily", 50)

        assert exc_info.value.allows_degradation is True
        assert exc_info.value.degraded_functionality == "breach_notifications"

    def test_constraint_violation_raises_persistence_error(self):
        """A schema that rejects the write is not an availability problem."""
        strict_path = os.path.join(self.temp_dir, "strict_flags.db")
        with sqlite3.connect(strict_path) as conn:
            conn.execute("""
                CREATE TABLE notification_flags (
                    account_id TEXT NOT NULL,
                    metric_type TEXT NOT NULL,
                    threshold REAL NOT NULL,
                    notified INTEGER NOT NULL DEFAULT 0 CHECK (notified = 0),
                    updated_at TEXT NOT NULL,
                    PRIMARY KEY (account_id, metric_type, threshold)
                )
            """)
        store = SQLiteFlagStore(strict_path)

        with pytest.raises(PersistenceError) as exc_info:
            store.compare_and_set("acct", "daily", 50, False, True)

        assert not isinstance(exc_info.value, NotificationStoreUnavailableError)
        assert exc_info.value.operation == "write"
        assert store.get("acct", "daily", 50) is False

    def test_health_check_fails_when_unreachable(self):
        with patch("propguard.persistence.flag_store.sqlite3.connect",
                   side_effect=sqlite3.OperationalError("unable to open database file")):
            assert self.store.health_check() is False


class TestCreateFlagStore:

    def test_without_path_is_in_memory(self):
        assert isinstance(create_flag_store(), InMemoryFlagStore)

    def test_with_path_is_sqlite(self, tmp_path):
        assert isinstance(create_flag_store(str(tmp_path / "flags.db")), SQLiteFlagStore)
