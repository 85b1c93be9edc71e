"""Browse state for hymnal.

Holds the song list, active filter, search query and sort order, and
recomputes the visible list when any of them change. Search recomputation
is debounced so typing doesn't refilter on every keystroke.
"""

import threading
from dataclasses import dataclass, field
from typing import Callable, Optional

from hymnal.core.logging_config import get_logger
from hymnal.db.models import Song
from hymnal.services.catalog import SortOrder, apply_favorites, filter_songs, sort_songs
from hymnal.services.collections import FAVORITES_FILTER

logger = get_logger(__name__)

ALL_FILTER = "All"
SEARCH_DEBOUNCE_SECONDS = 0.3


class Debouncer:
    """Runs the last scheduled callable after a quiet period.

    Each call to `call` cancels the pending timer and starts a new one.
    """

    def __init__(self, delay: float = SEARCH_DEBOUNCE_SECONDS):
        self.delay = delay
        self._timer: Optional[threading.Timer] = None
        self._pending: Optional[Callable[[], None]] = None
        self._lock = threading.Lock()

    def call(self, func: Callable[[], None]) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._pending = func
            self._timer = threading.Timer(self.delay, self._fire)
            self._timer.daemon = True
            self._timer.start()

    def _fire(self) -> None:
        with self._lock:
            func = self._pending
            self._pending = None
            self._timer = None
        if func is not None:
            func()

    @property
    def is_pending(self) -> bool:
        return self._pending is not None

    def flush(self) -> None:
        """Run the pending callable now."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = None
            func = self._pending
            self._pending = None
        if func is not None:
            func()

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = None
            self._pending = None


@dataclass
class BrowserState:
    """State of the song list.

    Attributes:
        songs: Full catalog with favorite flags applied
        active_filter: "All", "Favorites" or a collection id
        search_query: Current search text
        sort_order: Number or alphabetical order
        filtered_songs: Songs currently shown
        collection_songs: Songs of loaded collections by id
    """

    songs: list[Song] = field(default_factory=list)
    active_filter: str = ALL_FILTER
    search_query: str = ""
    sort_order: SortOrder = SortOrder.NUMBER
    filtered_songs: list[Song] = field(default_factory=list)
    collection_songs: dict[str, list[Song]] = field(default_factory=dict)
    debouncer: Debouncer = field(default_factory=Debouncer)

    _listeners: dict[str, list[Callable]] = field(default_factory=dict)

    def add_listener(self, property_name: str, callback: Callable) -> None:
        self._listeners.setdefault(property_name, []).append(callback)

    def remove_listener(self, property_name: str, callback: Callable) -> None:
        if property_name in self._listeners:
            self._listeners[property_name] = [
                cb for cb in self._listeners[property_name] if cb != callback
            ]

    def _notify(self, property_name: str, value) -> None:
        for callback in self._listeners.get(property_name, []):
            try:
                callback(value)
            except Exception:
                logger.exception("Listener for %s failed", property_name)

    def load(self, songs: list[Song], favorites: Optional[list[str]] = None) -> None:
        """Replace the catalog and recompute the visible list."""
        self.songs = apply_favorites(songs, favorites or [])
        self.refresh()

    def set_collection(self, collection_id: str, songs: list[Song]) -> None:
        favorites = [s.number for s in self.songs if s.is_favorite]
        self.collection_songs[collection_id] = apply_favorites(songs, favorites)
        if self.active_filter == collection_id:
            self.refresh()

    def _source(self) -> list[Song]:
        if self.active_filter == ALL_FILTER:
            return self.songs
        if self.active_filter == FAVORITES_FILTER:
            return [s for s in self.songs if s.is_favorite]
        return self.collection_songs.get(self.active_filter, [])

    def refresh(self) -> list[Song]:
        """Recompute filtered_songs from the current filter, query and order."""
        self.filtered_songs = sort_songs(filter_songs(self._source(), self.search_query), self.sort_order)
        self._notify("filtered_songs", self.filtered_songs)
        return self.filtered_songs

    def set_search_query(self, query: str) -> None:
        """Set the search text; the list updates after the debounce delay."""
        self.search_query = query
        self.debouncer.call(self.refresh)

    def flush(self) -> list[Song]:
        """Apply a pending search immediately."""
        self.debouncer.flush()
        return self.filtered_songs

    def change_filter(self, value: str) -> None:
        """Switch sort order ("Alphabet"/"Number") or the active filter."""
        try:
            order = SortOrder.parse(value)
        except ValueError:
            self.active_filter = value
            self._notify("active_filter", value)
        else:
            self.sort_order = order
            self._notify("sort_order", order)
        self.refresh()

    def toggle_favorite(self, number: str) -> bool:
        """Flip the favorite flag of a song everywhere it appears.

        Returns:
            The new favorite state
        """
        current = next((s.is_favorite for s in self.songs if s.number == number), False)
        new_state = not current

        def flip(songs: list[Song]) -> list[Song]:
            return [s.copy_with(is_favorite=new_state) if s.number == number else s for s in songs]

        self.songs = flip(self.songs)
        for key, songs in self.collection_songs.items():
            self.collection_songs[key] = flip(songs)
        self.refresh()
        return new_state

    @property
    def favorite_numbers(self) -> list[str]:
        return [s.number for s in self.songs if s.is_favorite]
