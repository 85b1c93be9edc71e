"""Song collections with access levels.

Collection metadata lives at song_collections/{id} and its songs at
collection_songs/{id}/{number}.
"""

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from hymnal.core.logging_config import get_logger
from hymnal.db.models import (
    AccessLevel,
    CollectionStatus,
    Role,
    Song,
    SongCollection,
)
from hymnal.services.remote import RealtimeDatabaseClient
from hymnal.services.songs import parse_songs

logger = get_logger(__name__)

COLLECTIONS_PATH = "song_collections"
COLLECTION_SONGS_PATH = "collection_songs"

FAVORITES_FILTER = "Favorites"

ACCESS_OK = "ok"
LOGIN_REQUIRED = "login_required"
PREMIUM_REQUIRED = "premium_required"
ACCESS_DENIED = "access_denied"

ACCESS_MESSAGES = {
    LOGIN_REQUIRED: "Please sign in to view this collection",
    PREMIUM_REQUIRED: "This collection is only available to premium members",
    ACCESS_DENIED: "You don't have access to this collection",
}


class CollectionError(Exception):
    """Collection operation failed."""


@dataclass
class Viewer:
    """Who is looking at a collection."""

    is_signed_in: bool = False
    is_anonymous: bool = False
    role: Role = Role.USER
    is_premium: bool = False


def check_access(level: AccessLevel, viewer: Viewer) -> str:
    """Decide whether a viewer may open a collection.

    Returns:
        "ok", "login_required", "premium_required" or "access_denied"
    """
    if level == AccessLevel.PUBLIC:
        return ACCESS_OK
    if level == AccessLevel.REGISTERED:
        return ACCESS_OK if viewer.is_signed_in else LOGIN_REQUIRED
    if level == AccessLevel.PREMIUM:
        if not viewer.is_signed_in:
            return LOGIN_REQUIRED
        return ACCESS_OK if viewer.is_premium or viewer.role.is_admin else PREMIUM_REQUIRED
    if level == AccessLevel.ADMIN:
        return ACCESS_OK if viewer.role.is_admin else ACCESS_DENIED
    if level == AccessLevel.SUPERADMIN:
        return ACCESS_OK if viewer.role == Role.SUPER_ADMIN else ACCESS_DENIED
    return ACCESS_DENIED


def check_favorites_access(viewer: Viewer) -> str:
    """The Favorites filter needs a real (non-guest) account."""
    if viewer.is_signed_in and not viewer.is_anonymous:
        return ACCESS_OK
    return LOGIN_REQUIRED


def slugify(name: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "_", name.strip().lower()).strip("_")
    return slug


class CollectionService:
    """CRUD for collections and their songs."""

    def __init__(self, db: RealtimeDatabaseClient):
        self.db = db

    def _all(self) -> list[SongCollection]:
        data = self.db.get(COLLECTIONS_PATH) or {}
        if not isinstance(data, dict):
            return []
        return [
            SongCollection.from_dict(key, value)
            for key, value in data.items()
            if isinstance(value, dict)
        ]

    def list_collections(self, viewer: Viewer, include_inactive: bool = False) -> list[SongCollection]:
        """List collections the viewer may open, newest first."""
        collections = [
            c
            for c in self._all()
            if (include_inactive or c.status == CollectionStatus.ACTIVE)
            and check_access(c.access_level, viewer) == ACCESS_OK
        ]
        collections.sort(key=lambda c: c.created_at or "", reverse=True)
        return collections

    def get_collection(self, collection_id: str) -> Optional[SongCollection]:
        data = self.db.get(f"{COLLECTIONS_PATH}/{collection_id}")
        if not isinstance(data, dict):
            return None
        return SongCollection.from_dict(collection_id, data)

    def get_collection_songs(self, collection_id: str, viewer: Viewer) -> list[Song]:
        """Songs of a collection sorted by number.

        Raises:
            CollectionError: If the collection doesn't exist or the viewer
                lacks access (message is the access result)
        """
        collection = self.get_collection(collection_id)
        if collection is None:
            raise CollectionError(f"Collection not found: {collection_id}")

        access = check_access(collection.access_level, viewer)
        if access != ACCESS_OK:
            raise CollectionError(access)

        songs = parse_songs(self.db.get(f"{COLLECTION_SONGS_PATH}/{collection_id}"))
        return sorted(songs, key=lambda s: s.numeric_number)

    def create_collection(
        self,
        name: str,
        created_by: str,
        description: str = "",
        access_level: AccessLevel = AccessLevel.PUBLIC,
        collection_id: Optional[str] = None,
    ) -> SongCollection:
        """Create an empty collection.

        Raises:
            CollectionError: If the name is empty or the id exists
        """
        if not name.strip():
            raise CollectionError("Collection name is required")
        collection_id = collection_id or slugify(name)
        if not collection_id:
            raise CollectionError(f"Cannot derive an id from {name!r}")
        if self.get_collection(collection_id) is not None:
            raise CollectionError(f"Collection already exists: {collection_id}")

        now = datetime.now().isoformat()
        collection = SongCollection(
            id=collection_id,
            name=name.strip(),
            description=description,
            access_level=access_level,
            created_at=now,
            updated_at=now,
            created_by=created_by,
        )
        self.db.set(f"{COLLECTIONS_PATH}/{collection_id}", collection.to_dict())
        logger.info("Created collection %s", collection_id)
        return collection

    def update_collection(self, collection_id: str, updated_by: str, **fields: Any) -> SongCollection:
        """Update metadata fields (name, description, access_level, status)."""
        collection = self.get_collection(collection_id)
        if collection is None:
            raise CollectionError(f"Collection not found: {collection_id}")

        for key, value in fields.items():
            if key == "access_level":
                value = AccessLevel.parse(value)
            elif key == "status":
                value = CollectionStatus.parse(value)
            elif key not in ("name", "description", "metadata"):
                raise CollectionError(f"Field cannot be updated: {key}")
            setattr(collection, key, value)

        collection.updated_at = datetime.now().isoformat()
        collection.updated_by = updated_by
        self.db.set(f"{COLLECTIONS_PATH}/{collection_id}", collection.to_dict())
        return collection

    def delete_collection(self, collection_id: str) -> None:
        self.db.delete(f"{COLLECTIONS_PATH}/{collection_id}")
        self.db.delete(f"{COLLECTION_SONGS_PATH}/{collection_id}")
        logger.info("Deleted collection %s", collection_id)

    def _refresh_count(self, collection_id: str) -> int:
        songs = parse_songs(self.db.get(f"{COLLECTION_SONGS_PATH}/{collection_id}"))
        self.db.update(
            f"{COLLECTIONS_PATH}/{collection_id}",
            {"song_count": len(songs), "updated_at": datetime.now().isoformat()},
        )
        return len(songs)

    def add_song(self, collection_id: str, song: Song) -> int:
        """Add a song to a collection.

        Returns:
            The new song count
        """
        if self.get_collection(collection_id) is None:
            raise CollectionError(f"Collection not found: {collection_id}")
        self.db.set(f"{COLLECTION_SONGS_PATH}/{collection_id}/{song.number}", song.to_dict())
        return self._refresh_count(collection_id)

    def remove_song(self, collection_id: str, number: str) -> int:
        if self.get_collection(collection_id) is None:
            raise CollectionError(f"Collection not found: {collection_id}")
        self.db.delete(f"{COLLECTION_SONGS_PATH}/{collection_id}/{number}")
        return self._refresh_count(collection_id)
