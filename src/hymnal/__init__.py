"""Hymnal - a songbook catalog with synced favorites.

This package provides tools for:
- Loading hymn lyrics from a bundled or remote JSON catalog
- Searching and sorting songs, and keeping favorites in sync with Firebase
- Administering roles, collections, announcements and song reports
"""

__version__ = "0.1.0"
