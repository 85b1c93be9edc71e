"""Song catalog repository.

Songs are read from the `songs` node of the Realtime Database when it is
reachable and non-empty; otherwise the JSON catalog bundled with the package
is used. The remote node is keyed by song number.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from hymnal.core.logging_config import get_logger
from hymnal.db.models import Song
from hymnal.services.remote import RealtimeDatabaseClient, RemoteDatabaseError

logger = get_logger(__name__)

SONGS_PATH = "songs"


class SongValidationError(ValueError):
    """Song is missing required fields or conflicts with an existing one."""


@dataclass
class SongDataResult:
    """Result of loading the catalog.

    Attributes:
        songs: Songs in catalog order
        is_online: True when the songs came from the Realtime Database
    """

    songs: list[Song] = field(default_factory=list)
    is_online: bool = False


def parse_songs(data: Any) -> list[Song]:
    """Parse songs from a decoded JSON array or number-keyed map.

    Entries that aren't objects (e.g. the null holes Firebase returns for
    sparse integer keys) are skipped.
    """
    if isinstance(data, dict):
        entries = data.values()
    elif isinstance(data, list):
        entries = data
    else:
        return []
    return [Song.from_dict(entry) for entry in entries if isinstance(entry, dict)]


def load_songs_file(path: Path) -> list[Song]:
    """Load songs from a JSON file.

    Args:
        path: Path to a JSON array or number-keyed map of songs

    Returns:
        Parsed songs

    Raises:
        FileNotFoundError: If the file doesn't exist
        SongValidationError: If the file isn't valid JSON
    """
    if not path.exists():
        raise FileNotFoundError(f"Song file not found: {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise SongValidationError(f"Invalid song file {path}: {e}")
    return parse_songs(data)


def validate_song(song: Song) -> None:
    if not song.number.strip():
        raise SongValidationError("Song number is required")
    if not song.title.strip():
        raise SongValidationError("Song title is required")


class SongRepository:
    """Reads and writes the song catalog.

    Attributes:
        db: Realtime Database client, or None when running offline
        bundled_path: JSON catalog shipped with the package
        prefer_remote: Whether get_songs tries the database first
    """

    def __init__(
        self,
        db: Optional[RealtimeDatabaseClient],
        bundled_path: Path,
        prefer_remote: bool = True,
    ):
        self.db = db
        self.bundled_path = bundled_path
        self.prefer_remote = prefer_remote

    def get_songs(self) -> SongDataResult:
        """Load the catalog, falling back to the bundled file.

        Returns:
            SongDataResult with is_online set when remote data was used
        """
        if self.db is not None and self.prefer_remote:
            try:
                songs = parse_songs(self.db.get(SONGS_PATH))
            except RemoteDatabaseError as e:
                logger.warning("Remote songs unavailable, using bundled catalog: %s", e)
            else:
                if songs:
                    logger.info("Loaded %d songs from the database", len(songs))
                    return SongDataResult(songs=songs, is_online=True)
                logger.info("Remote song list is empty, using bundled catalog")

        songs = load_songs_file(self.bundled_path)
        logger.info("Loaded %d bundled songs from %s", len(songs), self.bundled_path)
        return SongDataResult(songs=songs, is_online=False)

    def get_song(self, number: str) -> Optional[Song]:
        """Find a song by number in the current catalog."""
        for song in self.get_songs().songs:
            if song.number == number:
                return song
        return None

    def _require_db(self) -> RealtimeDatabaseClient:
        if self.db is None:
            raise RemoteDatabaseError("Realtime Database is not configured")
        return self.db

    def add_song(self, song: Song) -> None:
        """Add a new song.

        Raises:
            SongValidationError: If fields are missing or the number is taken
        """
        validate_song(song)
        db = self._require_db()
        if db.get(f"{SONGS_PATH}/{song.number}") is not None:
            raise SongValidationError(f"Song {song.number} already exists")
        db.set(f"{SONGS_PATH}/{song.number}", song.to_dict())
        logger.info("Added song %s", song.number)

    def update_song(self, original_number: str, song: Song) -> None:
        """Update a song, moving it when its number changed."""
        validate_song(song)
        db = self._require_db()
        if original_number != song.number:
            db.delete(f"{SONGS_PATH}/{original_number}")
        db.set(f"{SONGS_PATH}/{song.number}", song.to_dict())
        logger.info("Updated song %s (was %s)", song.number, original_number)

    def delete_song(self, number: str) -> None:
        self._require_db().delete(f"{SONGS_PATH}/{number}")
        logger.info("Deleted song %s", number)

    def upload_bundled(self, path: Optional[Path] = None) -> int:
        """Replace the remote catalog with a local JSON file.

        Args:
            path: Catalog to upload (defaults to the bundled one)

        Returns:
            Number of songs uploaded
        """
        songs = load_songs_file(path or self.bundled_path)
        for song in songs:
            validate_song(song)
        payload = {song.number: song.to_dict() for song in songs}
        self._require_db().set(SONGS_PATH, payload)
        logger.info("Uploaded %d songs", len(payload))
        return len(payload)
