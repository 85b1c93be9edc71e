"""Tests for search, sort and verse of the day."""

import random

import pytest

from hymnal.db.models import Song
from hymnal.services.catalog import (
    NO_SONGS_MESSAGE,
    NO_VERSES_MESSAGE,
    SortOrder,
    apply_favorites,
    filter_songs,
    sort_songs,
    verse_of_the_day,
)


class TestFilter:
    def test_blank_query_returns_all(self, sample_songs):
        assert filter_songs(sample_songs, "  ") == sample_songs

    def test_matches_title_case_insensitive(self, sample_songs):
        assert [s.number for s in filter_songs(sample_songs, "GRACE")] == ["001"]

    def test_matches_number(self, sample_songs):
        assert [s.number for s in filter_songs(sample_songs, "01")] == ["010", "001"]

    def test_no_match(self, sample_songs):
        assert filter_songs(sample_songs, "zzz") == []


class TestSort:
    def test_by_number_non_numeric_first(self, sample_songs):
        assert [s.number for s in sort_songs(sample_songs, SortOrder.NUMBER)] == ["A1", "001", "002", "010"]

    def test_alphabetical_ignores_case(self, sample_songs):
        titles = [s.title for s in sort_songs(sample_songs, SortOrder.ALPHABET)]

        assert titles == ["Abide with Me", "Amazing Grace", "Be Thou My Vision", "holy, Holy, Holy"]

    def test_parse(self):
        assert SortOrder.parse("alphabet") == SortOrder.ALPHABET
        assert SortOrder.parse("Number") == SortOrder.NUMBER
        with pytest.raises(ValueError):
            SortOrder.parse("Favorites")


def test_apply_favorites(sample_songs):
    songs = apply_favorites(sample_songs, ["001", "999"])

    assert [s.number for s in songs if s.is_favorite] == ["001"]
    assert not any(s.is_favorite for s in sample_songs)


class TestVerseOfTheDay:
    def test_no_songs(self):
        verse = verse_of_the_day([])

        assert verse.text == NO_SONGS_MESSAGE
        assert verse.location == ""

    def test_no_verses(self):
        verse = verse_of_the_day([Song("1", "Empty")])

        assert verse.text == NO_VERSES_MESSAGE

    def test_location_format(self, sample_songs):
        verse = verse_of_the_day(sample_songs, random.Random(3))

        assert verse.song is not None
        assert verse.song.verses
        assert verse.location == f"{verse.song.title} (No. {verse.song.number})"
        assert verse.text in [v.lyrics for v in verse.song.verses]
