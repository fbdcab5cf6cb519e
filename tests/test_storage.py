"""Tests for the key-value stores."""

from pathlib import Path

from ytm_proxy.core.storage import MemoryStore, SqliteStore


class TestMemoryStore:
    def test_set_get_remove(self) -> None:
        store = MemoryStore()
        store.set("a", "1")
        assert store.get("a") == "1"

        store.remove("a")
        assert store.get("a") is None

    def test_remove_missing_key(self) -> None:
        MemoryStore().remove("missing")


class TestSqliteStore:
    def test_values_survive_reopen(self, tmp_path: Path) -> None:
        db_path = tmp_path / "nested" / "session.db"
        SqliteStore(db_path).set("app-settings", '{"repeat_mode": "all"}')

        assert SqliteStore(db_path).get("app-settings") == '{"repeat_mode": "all"}'

    def test_set_overwrites(self, tmp_path: Path) -> None:
        store = SqliteStore(tmp_path / "session.db")
        store.set("key", "old")
        store.set("key", "new")
        assert store.get("key") == "new"

    def test_remove(self, tmp_path: Path) -> None:
        store = SqliteStore(tmp_path / "session.db")
        store.set("key", "value")
        store.remove("key")
        assert store.get("key") is None
