"""Display preferences stored in the local database."""

from typing import Any

from hymnal.db.local_client import LocalStore

FONT_SIZE_KEY = "font_size"
DARK_MODE_KEY = "is_dark_mode"
FONT_STYLE_KEY = "font_style"
TEXT_ALIGN_KEY = "text_align"

DEFAULT_FONT_SIZE = 16.0
MIN_FONT_SIZE = 12.0
MAX_FONT_SIZE = 30.0
DEFAULT_FONT_STYLE = "Roboto"
TEXT_ALIGNMENTS = ("left", "center", "right", "justify")


class PreferenceError(ValueError):
    """Invalid preference value."""


class Preferences:
    """Font, theme and alignment settings for reading lyrics."""

    def __init__(self, store: LocalStore):
        self.store = store

    @property
    def font_size(self) -> float:
        return float(self.store.get_pref(FONT_SIZE_KEY, DEFAULT_FONT_SIZE))

    def set_font_size(self, size: float) -> float:
        if not MIN_FONT_SIZE <= size <= MAX_FONT_SIZE:
            raise PreferenceError(f"Font size must be between {MIN_FONT_SIZE:g} and {MAX_FONT_SIZE:g}")
        self.store.set_pref(FONT_SIZE_KEY, float(size))
        return float(size)

    @property
    def is_dark_mode(self) -> bool:
        return bool(self.store.get_pref(DARK_MODE_KEY, False))

    def set_dark_mode(self, enabled: bool) -> None:
        self.store.set_pref(DARK_MODE_KEY, enabled)

    def toggle_theme(self) -> bool:
        """Switch between light and dark theme; returns the new dark mode state."""
        enabled = not self.is_dark_mode
        self.set_dark_mode(enabled)
        return enabled

    @property
    def font_style(self) -> str:
        return self.store.get_pref(FONT_STYLE_KEY, DEFAULT_FONT_STYLE)

    def set_font_style(self, style: str) -> None:
        if not style.strip():
            raise PreferenceError("Font style cannot be empty")
        self.store.set_pref(FONT_STYLE_KEY, style.strip())

    @property
    def text_align(self) -> str:
        return self.store.get_pref(TEXT_ALIGN_KEY, "left")

    def set_text_align(self, align: str) -> None:
        align = align.strip().lower()
        if align not in TEXT_ALIGNMENTS:
            raise PreferenceError(f"Invalid alignment: {align}. Use one of: {', '.join(TEXT_ALIGNMENTS)}")
        self.store.set_pref(TEXT_ALIGN_KEY, align)

    def as_dict(self) -> dict[str, Any]:
        return {
            "font_size": self.font_size,
            "dark_mode": self.is_dark_mode,
            "font_style": self.font_style,
            "text_align": self.text_align,
        }
