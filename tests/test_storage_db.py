"""
Tests for SQL-backed client storage and event persistence.

These tests point the db module at a temporary SQLite database, so they run
without any external database server.
"""

import json
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from mealfinder import db
from mealfinder.events import log_event
from mealfinder.favorites import FavoritesStore
from mealfinder.models import FavoriteEntry
from mealfinder.render import LABEL_SAVE_FAILED, SaveAction
from mealfinder.storage import DatabaseStorage, MemoryStorage, StorageError, get_storage


@pytest.fixture
def sqlite_db(tmp_path):
    """Enable the database layer against a temporary SQLite file."""
    db.configure_database(f"sqlite:///{tmp_path / 'mealfinder_test.db'}")
    db.init_db()
    yield
    db.configure_database(None)


class TestDatabaseStorage:
    """Tests for DatabaseStorage."""

    def test_get_storage_without_database_is_memory(self):
        """Test in-memory storage is used when DATABASE_URL is not set."""
        assert isinstance(get_storage("s1"), MemoryStorage)

    def test_get_storage_with_database(self, sqlite_db):
        assert isinstance(get_storage("s1"), DatabaseStorage)

    def test_set_and_get_item(self, sqlite_db):
        """Test values round-trip and a second write replaces the first."""
        storage = get_storage("s1")
        assert storage.get_item("k") is None

        storage.set_item("k", "v1")
        storage.set_item("k", "v2")

        assert storage.get_item("k") == "v2"
        assert get_storage("s2").get_item("k") is None

    def test_favorites_on_database(self, sqlite_db):
        """Test the favorites store works unchanged on the SQL backend."""
        store = FavoritesStore(get_storage("s1"))
        store.add(FavoriteEntry(id="1", name="A"))
        store.add(FavoriteEntry(id="1", name="A"))

        assert [e.id for e in FavoritesStore(get_storage("s1")).load()] == ["1"]

    def test_backend_failure_raises_storage_error(self, sqlite_db):
        """Test SQLAlchemy errors are wrapped in StorageError."""
        with patch("mealfinder.db.db_set_item", side_effect=OperationalError("INSERT", {}, Exception("locked"))):
            with pytest.raises(StorageError):
                get_storage("s1").set_item("k", "v")

    def test_backend_failure_sets_error_label(self, sqlite_db):
        """Test a failed favorites write turns into the error label."""
        with patch("mealfinder.db.db_set_item", side_effect=OperationalError("INSERT", {}, Exception("locked"))):
            action = SaveAction(FavoriteEntry(id="1", name="A"), FavoritesStore(get_storage("s1")))
            assert action.trigger() == LABEL_SAVE_FAILED


class TestEventPersistence:
    """Tests for events written to the events table."""

    def test_log_event_writes_row(self, sqlite_db):
        log_event("search_performed", session_id="s1", payload={"query": "chicken"})

        session = db.get_db_session()
        try:
            rows = session.query(db.EventRow).all()
        finally:
            session.close()

        assert len(rows) == 1
        assert rows[0].event_type == "search_performed"
        assert rows[0].session_id == "s1"
        assert json.loads(rows[0].payload) == {"query": "chicken"}

    def test_get_db_session_requires_database(self):
        with pytest.raises(RuntimeError):
            db.get_db_session()
