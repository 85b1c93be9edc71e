"""Favorite songs, stored locally and mirrored to the Realtime Database.

The remote copy lives at users/{uid}/favorites as {"<number>": true}. There
is no merge: whichever side was written last wins.
"""

from typing import Iterable, Optional

from hymnal.core.logging_config import get_logger
from hymnal.db.local_client import LocalStore
from hymnal.db.models import Session
from hymnal.services.auth import NotSignedInError
from hymnal.services.remote import RealtimeDatabaseClient, RemoteDatabaseError

logger = get_logger(__name__)


def favorites_path(uid: str) -> str:
    return f"users/{uid}/favorites"


class FavoritesService:
    """Favorites for the current user.

    Attributes:
        store: Local preferences store
        db: Realtime Database client (None when offline)
        session: Signed-in session (None when signed out)
    """

    def __init__(
        self,
        store: LocalStore,
        db: Optional[RealtimeDatabaseClient] = None,
        session: Optional[Session] = None,
    ):
        self.store = store
        self.db = db.with_token(session.id_token) if db is not None and session else db
        self.session = session

    @property
    def is_synced(self) -> bool:
        """Whether changes are mirrored remotely (signed in, not a guest)."""
        return self.db is not None and self.session is not None and self.session.is_logged_in

    def _read_remote(self) -> list[str]:
        data = self.db.get(favorites_path(self.session.uid))
        if isinstance(data, dict):
            return [str(k) for k, v in data.items() if v is True]
        if isinstance(data, list):
            # Integer-like keys may come back as a sparse list
            return [str(i) for i, v in enumerate(data) if v is True]
        return []

    def _write_remote(self, numbers: list[str]) -> None:
        self.db.set(favorites_path(self.session.uid), {n: True for n in numbers})

    def get(self) -> list[str]:
        """Get favorite song numbers.

        When signed in, a non-empty remote set replaces the local one.
        Remote failures are logged and the local set is returned.
        """
        if self.is_synced:
            try:
                remote = self._read_remote()
            except RemoteDatabaseError as e:
                logger.warning("Could not read remote favorites: %s", e)
            else:
                if remote:
                    return self.store.replace_favorites(remote)
        return self.store.get_favorites()

    def save(self, numbers: Iterable[str]) -> list[str]:
        """Store the favorite set locally and, when signed in, remotely."""
        stored = self.store.replace_favorites(numbers)
        if self.is_synced:
            try:
                self._write_remote(stored)
            except RemoteDatabaseError as e:
                logger.warning("Could not mirror favorites: %s", e)
        return stored

    def add(self, number: str) -> list[str]:
        numbers = self.get()
        if number not in numbers:
            numbers.append(number)
        return self.save(numbers)

    def remove(self, number: str) -> list[str]:
        return self.save([n for n in self.get() if n != number])

    def toggle(self, number: str) -> bool:
        """Flip a song's favorite state.

        Returns:
            True if the song is now a favorite
        """
        if number in self.get():
            self.remove(number)
            return False
        self.add(number)
        return True

    def is_favorite(self, number: str) -> bool:
        return number in self.store.get_favorites()

    def count(self) -> int:
        return len(self.store.get_favorites())

    def sync_to_cloud(self) -> list[str]:
        """Push the local set to the database, then pull it back.

        Returns:
            The favorites after the round trip

        Raises:
            NotSignedInError: Without a signed-in, non-guest session
            RemoteDatabaseError: If the database can't be reached
        """
        if not self.is_synced:
            raise NotSignedInError("favorites sync requires an account")

        local = self.store.get_favorites()
        self._write_remote(local)
        remote = self._read_remote()
        logger.info("Synced %d favorites for %s", len(remote), self.session.uid)
        return self.store.replace_favorites(remote)

    def clear_local(self) -> None:
        self.store.clear_favorites()
