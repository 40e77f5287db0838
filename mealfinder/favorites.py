"""
Favorites store: an append-only list of saved recipe summaries.

The list lives in client storage under a single key as a versioned JSON blob
(see FavoritesBlob). Entries are keyed by recipe id; saving an id that is
already present leaves the list unchanged, so the final stored state is
idempotent. Nothing is ever updated or removed.

Reading is forgiving: an absent key, malformed JSON or a blob that fails
validation all read as an empty list. The next successful save then writes a
fresh, valid blob over the corrupt one. Blobs written by the old site (a bare
list of {id, title, img}) are migrated on read.
"""

import json
import logging
from typing import List

from pydantic import ValidationError

from .models import FavoriteEntry, FavoritesBlob
from .storage import ClientStorage

logger = logging.getLogger(__name__)

# Key used by the original site; kept so old blobs are picked up
FAVORITES_KEY = "nc_favs"


class StorageParseError(ValueError):
    """Raised when a persisted blob cannot be parsed or validated."""


def parse_favorites(raw: str) -> List[FavoriteEntry]:
    """
    Parse a stored favorites blob.

    Raises:
        StorageParseError: If the blob is not valid JSON or has an unknown shape
    """
    try:
        data = json.loads(raw)
        if isinstance(data, list):
            return [FavoriteEntry.from_legacy(item) for item in data]
        return FavoritesBlob.model_validate(data).items
    except (ValueError, TypeError, KeyError, ValidationError) as e:
        raise StorageParseError(f"Invalid favorites blob: {e}") from e


class FavoritesStore:
    """Favorites list for one client storage namespace."""

    def __init__(self, storage: ClientStorage, key: str = FAVORITES_KEY) -> None:
        self.storage = storage
        self.key = key

    def load(self) -> List[FavoriteEntry]:
        """
        Read the saved favorites.

        Returns:
            Saved entries in save order; empty if nothing is stored or the
            stored blob is corrupt.

        Raises:
            StorageError: If the storage backend itself fails
        """
        raw = self.storage.get_item(self.key)
        if raw is None:
            return []
        try:
            return parse_favorites(raw)
        except StorageParseError as e:
            logger.warning("Favorites for session %s unreadable, treating as empty: %s", self.storage.session_id, e)
            return []

    def contains(self, recipe_id: str) -> bool:
        return any(entry.id == recipe_id for entry in self.load())

    def add(self, entry: FavoriteEntry) -> bool:
        """
        Append an entry unless its id is already saved.

        Returns:
            True if the entry was added, False if it was already present

        Raises:
            StorageError: If the storage backend fails
        """
        items = self.load()
        if any(existing.id == entry.id for existing in items):
            return False

        items.append(entry)
        blob = FavoritesBlob(items=items)
        self.storage.set_item(self.key, blob.model_dump_json())
        logger.info("Saved favorite %s for session %s (%d total)", entry.id, self.storage.session_id, len(items))
        return True
