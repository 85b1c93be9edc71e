"""Dashboard announcements stored under app_config/announcements."""

from datetime import datetime
from typing import Optional

from hymnal.core.logging_config import get_logger
from hymnal.db.models import Announcement, parse_timestamp
from hymnal.services.remote import RealtimeDatabaseClient

logger = get_logger(__name__)

ANNOUNCEMENTS_PATH = "app_config/announcements"

ANNOUNCEMENT_TYPES = ("text", "image")


class AnnouncementError(Exception):
    """Announcement operation failed."""


class AnnouncementService:
    """Reads and edits announcements."""

    def __init__(self, db: RealtimeDatabaseClient):
        self.db = db

    def _path(self, announcement_id: str) -> str:
        return f"{ANNOUNCEMENTS_PATH}/{announcement_id}"

    def list_all(self) -> list[Announcement]:
        """All announcements, newest first."""
        data = self.db.get(ANNOUNCEMENTS_PATH) or {}
        if not isinstance(data, dict):
            return []
        announcements = [
            Announcement.from_dict(key, value) for key, value in data.items() if isinstance(value, dict)
        ]
        announcements.sort(key=lambda a: a.created_at or "", reverse=True)
        return announcements

    def list_active(self, now: Optional[datetime] = None) -> list[Announcement]:
        """Active, unexpired announcements, lowest priority number first."""
        active = [a for a in self.list_all() if a.is_valid(now)]
        return sorted(active, key=lambda a: a.priority)

    def get(self, announcement_id: str) -> Optional[Announcement]:
        data = self.db.get(self._path(announcement_id))
        if not isinstance(data, dict):
            return None
        return Announcement.from_dict(announcement_id, data)

    def create(
        self,
        title: str,
        content: str,
        created_by: str,
        type: str = "text",
        image_url: str = "",
        priority: int = 1,
        expires_at: Optional[str] = None,
        is_active: bool = True,
    ) -> str:
        """Create an announcement.

        Returns:
            The generated announcement id

        Raises:
            AnnouncementError: If required fields are missing or invalid
        """
        if not title.strip():
            raise AnnouncementError("Title is required")
        if type not in ANNOUNCEMENT_TYPES:
            raise AnnouncementError(f"Invalid type: {type}. Use one of: {', '.join(ANNOUNCEMENT_TYPES)}")
        if type == "image" and not image_url:
            raise AnnouncementError("Image announcements need an image URL")
        if type == "text" and not content.strip():
            raise AnnouncementError("Content is required")
        if expires_at and parse_timestamp(expires_at) is None:
            raise AnnouncementError(f"Invalid expiry date: {expires_at}")

        announcement = Announcement(
            id="",
            title=title.strip(),
            content=content,
            type=type,
            image_url=image_url,
            is_active=is_active,
            priority=priority,
            created_at=datetime.now().isoformat(),
            created_by=created_by,
            expires_at=expires_at,
        )
        announcement_id = self.db.push(ANNOUNCEMENTS_PATH, announcement.to_dict())
        logger.info("Created announcement %s", announcement_id)
        return announcement_id

    def _require(self, announcement_id: str) -> Announcement:
        announcement = self.get(announcement_id)
        if announcement is None:
            raise AnnouncementError(f"Announcement not found: {announcement_id}")
        return announcement

    def set_active(self, announcement_id: str, active: bool) -> None:
        self._require(announcement_id)
        self.db.update(self._path(announcement_id), {"isActive": active})

    def set_priority(self, announcement_id: str, priority: int) -> None:
        self._require(announcement_id)
        self.db.update(self._path(announcement_id), {"priority": priority})

    def delete(self, announcement_id: str) -> None:
        self.db.delete(self._path(announcement_id))
        logger.info("Deleted announcement %s", announcement_id)

    def cleanup_expired(self, now: Optional[datetime] = None) -> int:
        """Delete expired announcements.

        Returns:
            Number of announcements deleted
        """
        expired = [a for a in self.list_all() if a.is_expired(now)]
        for announcement in expired:
            self.delete(announcement.id)
        if expired:
            logger.info("Removed %d expired announcements", len(expired))
        return len(expired)
