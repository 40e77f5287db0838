"""
Per-session client storage for small opaque blobs.

This stands in for the browser's local storage: every browser session gets
its own key-value namespace holding strings (JSON blobs written by the
favorites store and the account registry). There is no expiry and no
schema knowledge here.

The storage:
- Uses the storage_blobs table when DATABASE_URL is set
- Otherwise falls back to a process-local in-memory dict (lost on restart)

Writes are plain last-writer-wins; concurrent read-modify-write cycles from
two tabs of the same session can overwrite each other.
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Dict, Optional

from sqlalchemy.exc import SQLAlchemyError

from . import db

logger = logging.getLogger(__name__)


class StorageError(RuntimeError):
    """Raised when the storage backend cannot read or write a blob."""


class ClientStorage(ABC):
    """Key-value blob storage bound to one session."""

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Return the stored string for key, or None if absent."""

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""


# In-memory store: session_id -> key -> value
# Used as fallback when DATABASE_URL is not set
_MEMORY_STORE: Dict[str, Dict[str, str]] = {}
_MEMORY_LOCK = threading.Lock()


class MemoryStorage(ClientStorage):
    """Process-local storage backend."""

    def get_item(self, key: str) -> Optional[str]:
        with _MEMORY_LOCK:
            return _MEMORY_STORE.get(self.session_id, {}).get(key)

    def set_item(self, key: str, value: str) -> None:
        with _MEMORY_LOCK:
            _MEMORY_STORE.setdefault(self.session_id, {})[key] = value


class DatabaseStorage(ClientStorage):
    """SQL-backed storage backend (storage_blobs table)."""

    def get_item(self, key: str) -> Optional[str]:
        try:
            return db.db_get_item(self.session_id, key)
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to read {key!r} from database storage: {e}") from e

    def set_item(self, key: str, value: str) -> None:
        try:
            db.db_set_item(self.session_id, key, value)
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to write {key!r} to database storage: {e}") from e


def get_storage(session_id: str) -> ClientStorage:
    """
    Get the client storage for a session.

    Uses database storage if DATABASE_URL is set, otherwise in-memory storage.
    """
    if db.db_is_enabled():
        return DatabaseStorage(session_id)
    return MemoryStorage(session_id)


def clear_memory_storage() -> None:
    """Drop every in-memory session (used by tests)."""
    with _MEMORY_LOCK:
        _MEMORY_STORE.clear()
