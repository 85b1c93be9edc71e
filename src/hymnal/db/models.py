"""Data models for hymnal entities.

Provides dataclasses for songs, user records, collections, announcements
and song reports with serialization to/from the JSON documents stored in
the Realtime Database.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Optional


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO timestamp, returning None for empty or malformed values."""
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None


def _naive(value: datetime) -> datetime:
    return value.replace(tzinfo=None) if value.tzinfo else value


@dataclass
class Verse:
    """A single numbered verse (or chorus) of a song."""

    number: str
    lyrics: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Verse":
        number = data.get("number", data.get("verse_number", ""))
        return cls(number=str(number or ""), lyrics=data.get("lyrics") or "")

    def to_dict(self) -> dict[str, Any]:
        return {"number": self.number, "lyrics": self.lyrics}


@dataclass
class Song:
    """Hymn with its verses.

    Attributes:
        number: Song number as printed in the hymnal (e.g., "001")
        title: Song title
        verses: Ordered verses
        audio_url: Optional URL of an audio recording
        is_favorite: Runtime flag, never persisted with the song
    """

    number: str
    title: str
    verses: list[Verse] = field(default_factory=list)
    audio_url: Optional[str] = None
    is_favorite: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Song":
        """Create a Song from a JSON object.

        Both the current keys (number, title, audio_url) and the legacy
        ones (song_number, song_title, url) are accepted.

        Args:
            data: Decoded JSON object

        Returns:
            Song instance
        """
        number = data.get("number", data.get("song_number", ""))
        title = data.get("title", data.get("song_title", ""))
        audio_url = data.get("audio_url", data.get("url")) or None
        verses = [Verse.from_dict(v) for v in data.get("verses") or [] if isinstance(v, dict)]
        return cls(
            number=str(number or ""),
            title=str(title or ""),
            verses=verses,
            audio_url=audio_url,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert Song to its JSON document (without the favorite flag)."""
        data: dict[str, Any] = {
            "number": self.number,
            "title": self.title,
            "verses": [v.to_dict() for v in self.verses],
        }
        if self.has_audio:
            data["audio_url"] = self.audio_url
        return data

    @property
    def has_audio(self) -> bool:
        return bool(self.audio_url)

    @property
    def numeric_number(self) -> int:
        """Song number as an integer, 0 when it isn't numeric."""
        try:
            return int(self.number)
        except (TypeError, ValueError):
            return 0

    def copy_with(self, **changes: Any) -> "Song":
        return replace(self, **changes)


class Role(str, Enum):
    """Role string stored in users/{uid}/role."""

    USER = "user"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"

    @classmethod
    def parse(cls, value: Optional[str]) -> "Role":
        """Parse a role string; anything unknown is a plain user."""
        if not value:
            return cls.USER
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.USER

    @property
    def is_admin(self) -> bool:
        return self in (Role.ADMIN, Role.SUPER_ADMIN)


@dataclass
class UserRecord:
    """User document stored at users/{uid}."""

    uid: str
    email: str = ""
    display_name: str = ""
    role: Role = Role.USER
    permissions: list[str] = field(default_factory=list)
    is_premium: bool = False
    created_at: Optional[str] = None
    last_sign_in: Optional[str] = None

    @classmethod
    def from_dict(cls, uid: str, data: dict[str, Any]) -> "UserRecord":
        permissions = data.get("permissions") or []
        if isinstance(permissions, dict):
            permissions = [k for k, v in permissions.items() if v]
        return cls(
            uid=uid,
            email=data.get("email") or "",
            display_name=data.get("displayName") or "",
            role=Role.parse(data.get("role")),
            permissions=[str(p) for p in permissions],
            is_premium=bool(data.get("isPremium", False)),
            created_at=data.get("createdAt"),
            last_sign_in=data.get("lastSignIn"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "uid": self.uid,
            "email": self.email,
            "displayName": self.display_name,
            "role": self.role.value,
            "permissions": list(self.permissions),
            "isPremium": self.is_premium,
            "createdAt": self.created_at,
            "lastSignIn": self.last_sign_in,
        }


class AccessLevel(str, Enum):
    """Who may view a collection, from least to most restricted."""

    PUBLIC = "public"
    REGISTERED = "registered"
    PREMIUM = "premium"
    ADMIN = "admin"
    SUPERADMIN = "superadmin"

    @property
    def rank(self) -> int:
        return list(AccessLevel).index(self)

    def has_access_to(self, required: "AccessLevel") -> bool:
        """Check if this level is at least as high as `required`."""
        return self.rank >= required.rank

    @classmethod
    def parse(cls, value: Optional[str]) -> "AccessLevel":
        try:
            return cls(str(value or "").lower())
        except ValueError:
            return cls.PUBLIC


class CollectionStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    ARCHIVED = "archived"

    @classmethod
    def parse(cls, value: Optional[str]) -> "CollectionStatus":
        try:
            return cls(str(value or "").lower())
        except ValueError:
            return cls.ACTIVE


@dataclass
class SongCollection:
    """Named group of songs with an access level.

    Attributes:
        id: Collection key under song_collections
        name: Display name
        description: Free text description
        access_level: Minimum access level to view the songs
        status: active/inactive/archived
        song_count: Number of songs under collection_songs/{id}
        created_at: ISO timestamp when created
        updated_at: ISO timestamp when last updated
        created_by: uid of the creator
        updated_by: uid of the last editor
        metadata: Extra free-form data
    """

    id: str
    name: str
    description: str = ""
    access_level: AccessLevel = AccessLevel.PUBLIC
    status: CollectionStatus = CollectionStatus.ACTIVE
    song_count: int = 0
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    created_by: str = ""
    updated_by: Optional[str] = None
    metadata: Optional[dict[str, Any]] = None

    @classmethod
    def from_dict(cls, collection_id: str, data: dict[str, Any]) -> "SongCollection":
        try:
            song_count = int(data.get("song_count") or 0)
        except (TypeError, ValueError):
            song_count = 0
        metadata = data.get("metadata")
        return cls(
            id=collection_id,
            name=data.get("name") or "",
            description=data.get("description") or "",
            access_level=AccessLevel.parse(data.get("access_level")),
            status=CollectionStatus.parse(data.get("status")),
            song_count=song_count,
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
            created_by=data.get("created_by") or "",
            updated_by=data.get("updated_by"),
            metadata=dict(metadata) if isinstance(metadata, dict) else None,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "description": self.description,
            "access_level": self.access_level.value,
            "status": self.status.value,
            "song_count": self.song_count,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "created_by": self.created_by,
        }
        if self.updated_by:
            data["updated_by"] = self.updated_by
        if self.metadata:
            data["metadata"] = self.metadata
        return data


@dataclass
class Announcement:
    """Dashboard announcement stored under app_config/announcements.

    Lower priority numbers are shown first. Display customization fields are
    kept as opaque strings for the clients that render them.
    """

    id: str
    title: str
    content: str
    type: str = "text"
    image_url: str = ""
    is_active: bool = True
    priority: int = 1
    created_at: Optional[str] = None
    created_by: str = "Unknown"
    expires_at: Optional[str] = None
    text_color: Optional[str] = None
    background_color: Optional[str] = None
    text_style: Optional[str] = None
    font_size: Optional[float] = None
    icon: Optional[str] = None

    @classmethod
    def from_dict(cls, announcement_id: str, data: dict[str, Any]) -> "Announcement":
        try:
            priority = int(data.get("priority", 1))
        except (TypeError, ValueError):
            priority = 1
        font_size = data.get("fontSize")
        return cls(
            id=announcement_id,
            title=str(data.get("title") or ""),
            content=str(data.get("content") or ""),
            type=str(data.get("type") or "text"),
            image_url=str(data.get("imageUrl") or ""),
            is_active=data.get("isActive") is True,
            priority=priority,
            created_at=data.get("createdAt"),
            created_by=str(data.get("createdBy") or "Unknown"),
            expires_at=data.get("expiresAt"),
            text_color=data.get("textColor"),
            background_color=data.get("backgroundColor"),
            text_style=data.get("textStyle"),
            font_size=float(font_size) if font_size is not None else None,
            icon=data.get("selectedIcon"),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "title": self.title,
            "content": self.content,
            "type": self.type,
            "imageUrl": self.image_url,
            "isActive": self.is_active,
            "priority": self.priority,
            "createdAt": self.created_at,
            "createdBy": self.created_by,
            "expiresAt": self.expires_at,
        }
        optional = {
            "textColor": self.text_color,
            "backgroundColor": self.background_color,
            "textStyle": self.text_style,
            "fontSize": self.font_size,
            "selectedIcon": self.icon,
        }
        data.update({k: v for k, v in optional.items() if v is not None})
        return data

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        expires = parse_timestamp(self.expires_at)
        if expires is None:
            return False
        return _naive(now or datetime.now()) > _naive(expires)

    def is_valid(self, now: Optional[datetime] = None) -> bool:
        """Active and not expired."""
        return self.is_active and not self.is_expired(now)


REPORT_STATUSES = ("pending", "resolved", "dismissed")

ISSUE_TYPES = (
    "Wrong Lyrics",
    "Spelling Error",
    "Missing Verse",
    "Extra Verse",
    "Wrong Song Title",
    "Formatting Issue",
    "Wrong Song Number",
    "Duplicate Song",
    "Other",
)


@dataclass
class SongReport:
    """User-submitted problem report about a song."""

    id: str
    song_number: str
    song_title: str
    reporter_email: str
    reporter_name: str
    issue_type: str
    description: str
    created_at: str
    specific_verse: Optional[str] = None
    status: str = "pending"
    admin_response: Optional[str] = None
    resolved_at: Optional[str] = None

    @classmethod
    def from_dict(cls, report_id: str, data: dict[str, Any]) -> "SongReport":
        return cls(
            id=data.get("id") or report_id,
            song_number=data.get("songNumber") or "",
            song_title=data.get("songTitle") or "",
            reporter_email=data.get("reporterEmail") or "",
            reporter_name=data.get("reporterName") or "",
            issue_type=data.get("issueType") or "",
            description=data.get("description") or "",
            specific_verse=data.get("specificVerse"),
            created_at=data.get("createdAt") or "",
            status=data.get("status") or "pending",
            admin_response=data.get("adminResponse"),
            resolved_at=data.get("resolvedAt"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "songNumber": self.song_number,
            "songTitle": self.song_title,
            "reporterEmail": self.reporter_email,
            "reporterName": self.reporter_name,
            "issueType": self.issue_type,
            "description": self.description,
            "specificVerse": self.specific_verse,
            "createdAt": self.created_at,
            "status": self.status,
            "adminResponse": self.admin_response,
            "resolvedAt": self.resolved_at,
        }

    @property
    def is_pending(self) -> bool:
        return self.status == "pending"


@dataclass
class Session:
    """Signed-in Firebase user as persisted between CLI runs.

    Attributes:
        uid: Firebase user id
        email: E-mail address (empty for anonymous users)
        display_name: Display name
        id_token: ID token sent as `auth` to the Realtime Database
        refresh_token: Token used to obtain a fresh id_token
        is_anonymous: Whether this is a guest session
    """

    uid: str
    email: str = ""
    display_name: str = ""
    id_token: str = ""
    refresh_token: str = ""
    is_anonymous: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Session":
        return cls(
            uid=data["uid"],
            email=data.get("email") or "",
            display_name=data.get("display_name") or "",
            id_token=data.get("id_token") or "",
            refresh_token=data.get("refresh_token") or "",
            is_anonymous=bool(data.get("is_anonymous", False)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "uid": self.uid,
            "email": self.email,
            "display_name": self.display_name,
            "id_token": self.id_token,
            "refresh_token": self.refresh_token,
            "is_anonymous": self.is_anonymous,
        }

    @property
    def is_logged_in(self) -> bool:
        """Signed in with a real account rather than as a guest."""
        return not self.is_anonymous

    @property
    def label(self) -> str:
        if self.is_anonymous:
            return "Guest"
        return self.display_name or self.email or self.uid
