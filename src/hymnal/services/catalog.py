"""In-memory catalog operations: search, sort, favorites and verse of the day."""

import random
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from hymnal.db.models import Song

NO_SONGS_MESSAGE = "No songs found in the database."
NO_VERSES_MESSAGE = "Songs are available, but they have no verses."


class SortOrder(str, Enum):
    NUMBER = "Number"
    ALPHABET = "Alphabet"

    @classmethod
    def parse(cls, value: str) -> "SortOrder":
        for order in cls:
            if order.value.lower() == value.strip().lower():
                return order
        raise ValueError(f"Unknown sort order: {value}")


def filter_songs(songs: Iterable[Song], query: str) -> list[Song]:
    """Keep songs whose number or title contains the query (case-insensitive)."""
    needle = (query or "").strip().lower()
    if not needle:
        return list(songs)
    return [s for s in songs if needle in s.number.lower() or needle in s.title.lower()]


def sort_songs(songs: Iterable[Song], order: SortOrder) -> list[Song]:
    if order == SortOrder.ALPHABET:
        return sorted(songs, key=lambda s: s.title.casefold())
    return sorted(songs, key=lambda s: s.numeric_number)


def apply_favorites(songs: Iterable[Song], numbers: Iterable[str]) -> list[Song]:
    """Return copies of songs with is_favorite set from the favorite numbers."""
    favorites = set(numbers)
    return [s.copy_with(is_favorite=s.number in favorites) for s in songs]


@dataclass
class VerseOfTheDay:
    text: str
    location: str
    song: Optional[Song] = None


def verse_of_the_day(songs: list[Song], rng: Optional[random.Random] = None) -> VerseOfTheDay:
    """Pick a random verse from songs that have any.

    Args:
        songs: Catalog to choose from
        rng: Random source (module random when omitted)

    Returns:
        VerseOfTheDay; when nothing can be picked, text holds a fixed message
        and location is empty
    """
    if not songs:
        return VerseOfTheDay(text=NO_SONGS_MESSAGE, location="")

    with_verses = [s for s in songs if s.verses]
    if not with_verses:
        return VerseOfTheDay(text=NO_VERSES_MESSAGE, location="")

    rng = rng or random.Random()
    song = rng.choice(with_verses)
    verse = rng.choice(song.verses)
    return VerseOfTheDay(
        text=verse.lyrics,
        location=f"{song.title} (No. {song.number})",
        song=song,
    )
