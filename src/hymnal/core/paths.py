"""Platform-specific path resolution for Hymnal.

This module handles cross-platform path conventions for storing user data,
configuration, and cache files.

Supported Platforms:
- macOS: ~/Library/Application Support/Hymnal/
- Linux: ~/.local/share/hymnal/ (XDG_DATA_HOME)
- Windows: %APPDATA%\\Hymnal\\
"""

import os
import sys
from pathlib import Path


def get_user_data_dir() -> Path:
    """Get the platform-specific user data directory.

    Returns:
        Path to the user data directory for Hymnal.
    """
    if "HYMNAL_DATA_DIR" in os.environ:
        return Path(os.environ["HYMNAL_DATA_DIR"])

    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "Hymnal"
    if sys.platform == "win32":
        appdata = os.environ.get("APPDATA", "")
        if not appdata:
            return Path.home() / "AppData" / "Roaming" / "Hymnal"
        return Path(appdata) / "Hymnal"

    xdg_data_home = os.environ.get("XDG_DATA_HOME")
    if xdg_data_home:
        return Path(xdg_data_home) / "hymnal"
    return Path.home() / ".local" / "share" / "hymnal"


def get_cache_dir() -> Path:
    """Get the platform-specific cache directory.

    Returns:
        Path to the cache directory for Hymnal.
    """
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Caches" / "Hymnal"
    if sys.platform == "win32":
        localappdata = os.environ.get("LOCALAPPDATA", "")
        if not localappdata:
            return Path.home() / "AppData" / "Local" / "Hymnal" / "cache"
        return Path(localappdata) / "Hymnal" / "cache"

    xdg_cache_home = os.environ.get("XDG_CACHE_HOME")
    if xdg_cache_home:
        return Path(xdg_cache_home) / "hymnal"
    return Path.home() / ".cache" / "hymnal"


def get_config_dir() -> Path:
    """Get the platform-specific config directory.

    Returns:
        Path to the config directory for Hymnal.
    """
    if sys.platform == "win32":
        appdata = os.environ.get("APPDATA")
        if appdata:
            return Path(appdata) / "hymnal"
        return Path.home() / "AppData" / "Roaming" / "hymnal"

    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        return Path(xdg_config) / "hymnal"
    return Path.home() / ".config" / "hymnal"


def get_config_path() -> Path:
    """Get the path to the config.toml file."""
    return get_config_dir() / "config.toml"


def get_default_db_path() -> Path:
    """Get the default path of the local preferences database."""
    return get_user_data_dir() / "hymnal.db"


def get_log_dir() -> Path:
    """Get the default log directory."""
    return get_user_data_dir() / "logs"


def get_bundled_songs_path() -> Path:
    """Get the path to the song catalog shipped with the package.

    Returns:
        Path to data/songs.json inside the installed package.
    """
    return Path(__file__).resolve().parent.parent / "data" / "songs.json"
