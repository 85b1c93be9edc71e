"""Local database client for hymnal.

Provides SQLite storage for preferences, favorites and the signed-in
session. This is the local key-value side of favorites sync; the remote
side lives in the Realtime Database.
"""

import json
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Generator, Iterable, Optional

from hymnal.db.models import Session
from hymnal.db.schema import ALL_SCHEMA_STATEMENTS, SESSION_KEY


class LocalStore:
    """Client for the local preferences database.

    Attributes:
        db_path: Path to the SQLite database file
        connection: Active database connection
    """

    def __init__(self, db_path: Path):
        """Initialize the local store.

        Args:
            db_path: Path to the SQLite database file
        """
        self.db_path = db_path
        self._connection: Optional[sqlite3.Connection] = None

    @property
    def connection(self) -> sqlite3.Connection:
        """Get or create database connection.

        The schema is created on first connect.

        Returns:
            Active SQLite connection
        """
        if self._connection is None:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)

            self._connection = sqlite3.connect(self.db_path)
            self._connection.row_factory = sqlite3.Row
            self.initialize_schema()

        return self._connection

    def close(self) -> None:
        """Close the database connection."""
        if self._connection:
            self._connection.close()
            self._connection = None

    def __enter__(self) -> "LocalStore":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.close()

    @contextmanager
    def transaction(self) -> Generator[sqlite3.Connection, None, None]:
        """Context manager for database transactions.

        Yields:
            SQLite connection with active transaction
        """
        conn = self.connection
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise

    def initialize_schema(self) -> None:
        """Create tables and indexes if they don't exist."""
        conn = self.connection
        cursor = conn.cursor()
        for statement in ALL_SCHEMA_STATEMENTS:
            cursor.execute(statement)
        conn.commit()

    # Preference operations

    def get_pref(self, key: str, default: Any = None) -> Any:
        """Get a preference value.

        Args:
            key: Preference key
            default: Value returned when the key is not stored

        Returns:
            Decoded JSON value or default
        """
        cursor = self.connection.cursor()
        cursor.execute("SELECT value FROM preferences WHERE key = ?", (key,))
        row = cursor.fetchone()
        if row is None:
            return default
        return json.loads(row[0])

    def set_pref(self, key: str, value: Any) -> None:
        """Store a JSON-serializable preference value."""
        with self.transaction() as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO preferences (key, value, updated_at)
                VALUES (?, ?, datetime('now'))
                """,
                (key, json.dumps(value)),
            )

    def delete_pref(self, key: str) -> bool:
        """Delete a preference.

        Returns:
            True if a value was removed
        """
        with self.transaction() as conn:
            cursor = conn.execute("DELETE FROM preferences WHERE key = ?", (key,))
            return cursor.rowcount > 0

    def all_prefs(self) -> dict[str, Any]:
        cursor = self.connection.cursor()
        cursor.execute("SELECT key, value FROM preferences ORDER BY key")
        return {row[0]: json.loads(row[1]) for row in cursor.fetchall()}

    # Favorite operations

    def get_favorites(self) -> list[str]:
        """Get stored favorite song numbers in the order they were added."""
        cursor = self.connection.cursor()
        cursor.execute("SELECT song_number FROM favorites ORDER BY position")
        return [row[0] for row in cursor.fetchall()]

    def replace_favorites(self, song_numbers: Iterable[str]) -> list[str]:
        """Replace the whole favorites set.

        Duplicates are dropped, keeping the first occurrence.

        Args:
            song_numbers: New favorite song numbers

        Returns:
            The stored list
        """
        unique = list(dict.fromkeys(str(n) for n in song_numbers if str(n)))
        with self.transaction() as conn:
            conn.execute("DELETE FROM favorites")
            conn.executemany(
                "INSERT INTO favorites (song_number, position) VALUES (?, ?)",
                [(number, position) for position, number in enumerate(unique)],
            )
        return unique

    def clear_favorites(self) -> None:
        with self.transaction() as conn:
            conn.execute("DELETE FROM favorites")

    # Session operations

    def save_session(self, session: Session) -> None:
        self.set_pref(SESSION_KEY, session.to_dict())

    def load_session(self) -> Optional[Session]:
        """Load the persisted session, or None when signed out."""
        data = self.get_pref(SESSION_KEY)
        if not data:
            return None
        return Session.from_dict(data)

    def clear_session(self) -> None:
        self.delete_pref(SESSION_KEY)
