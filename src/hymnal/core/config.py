"""Configuration management for Hymnal.

Handles loading, saving, and validating TOML configuration stored in:
- macOS/Linux: ~/.config/hymnal/config.toml (XDG_CONFIG_HOME)
- Windows: %APPDATA%\\hymnal\\config.toml

Environment variables take precedence over values read from the file.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import tomllib
import tomli_w

from hymnal.core.paths import (
    get_bundled_songs_path,
    get_config_path,
    get_default_db_path,
    get_log_dir,
)

# Dotted TOML key -> HymnalConfig attribute
CONFIG_KEYS = {
    "firebase.database_url": "firebase_database_url",
    "firebase.api_key": "firebase_api_key",
    "firebase.timeout_seconds": "firebase_timeout_seconds",
    "songs.bundled_path": "songs_bundled_path",
    "songs.prefer_remote": "songs_prefer_remote",
    "roles.timeout_seconds": "roles_timeout_seconds",
    "roles.cache_ttl_seconds": "roles_cache_ttl_seconds",
    "roles.admin_emails": "admin_emails",
    "roles.super_admin_emails": "super_admin_emails",
    "database.path": "db_path",
    "logging.level": "log_level",
    "logging.dir": "log_dir",
    "links.play_store_url": "play_store_url",
    "links.donation_url": "donation_url",
}

ENV_OVERRIDES = {
    "HYMNAL_FIREBASE_API_KEY": "firebase_api_key",
    "HYMNAL_FIREBASE_DATABASE_URL": "firebase_database_url",
    "HYMNAL_DB_PATH": "db_path",
    "HYMNAL_LOG_LEVEL": "log_level",
}


@dataclass
class HymnalConfig:
    """Configuration for the hymnal CLIs.

    Attributes:
        firebase_database_url: Realtime Database root URL
        firebase_api_key: Web API key used for Identity Toolkit calls
        firebase_timeout_seconds: Request timeout for database calls
        songs_bundled_path: JSON catalog used when the remote one is unavailable
        songs_prefer_remote: Whether to try the remote catalog first
        roles_timeout_seconds: Timeout for the admin role lookup
        roles_cache_ttl_seconds: How long a resolved role stays cached
        admin_emails: Fallback admin e-mail list
        super_admin_emails: Fallback super admin e-mail list
        db_path: Local SQLite preferences database
        log_level: Logging level name
        log_dir: Directory for hymnal.log
        play_store_url: Store page opened by `hymnal open play-store`
        donation_url: Page opened by `hymnal open donate`
    """

    # Firebase
    firebase_database_url: str = ""
    firebase_api_key: str = ""
    firebase_timeout_seconds: int = 15

    # Songs
    songs_bundled_path: Path = field(default_factory=get_bundled_songs_path)
    songs_prefer_remote: bool = True

    # Roles
    roles_timeout_seconds: int = 8
    roles_cache_ttl_seconds: int = 60
    admin_emails: list[str] = field(default_factory=list)
    super_admin_emails: list[str] = field(default_factory=list)

    # Local Database
    db_path: Path = field(default_factory=get_default_db_path)

    # Logging
    log_level: str = "INFO"
    log_dir: Path = field(default_factory=get_log_dir)

    # External links
    play_store_url: str = "https://play.google.com/store/apps/details?id=com.haweeinc.lpmi_premium"
    donation_url: str = "https://haweeinc.com/donate"

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "HymnalConfig":
        """Load configuration from TOML file.

        Args:
            path: Path to config file (defaults to standard location)

        Returns:
            HymnalConfig instance with loaded values

        Raises:
            FileNotFoundError: If config file doesn't exist
        """
        if path is None:
            path = get_config_path()

        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path, "rb") as f:
            data = tomllib.load(f)

        config = cls()
        for dotted, attr in CONFIG_KEYS.items():
            section, key = dotted.split(".")
            if section in data and key in data[section]:
                value = data[section][key]
                if isinstance(getattr(config, attr), Path):
                    value = Path(value)
                setattr(config, attr, value)

        config.apply_env_overrides()
        return config

    def apply_env_overrides(self) -> None:
        """Override values from HYMNAL_* environment variables."""
        for env_var, attr in ENV_OVERRIDES.items():
            value = os.environ.get(env_var)
            if value:
                if isinstance(getattr(self, attr), Path):
                    setattr(self, attr, Path(value))
                else:
                    setattr(self, attr, value)

    def save(self, path: Optional[Path] = None) -> None:
        """Save configuration to TOML file.

        Args:
            path: Path to save config (defaults to standard location)
        """
        if path is None:
            path = get_config_path()

        path.parent.mkdir(parents=True, exist_ok=True)

        data: dict[str, dict[str, Any]] = {}
        for dotted, attr in CONFIG_KEYS.items():
            section, key = dotted.split(".")
            value = getattr(self, attr)
            if isinstance(value, Path):
                value = str(value)
            data.setdefault(section, {})[key] = value

        with open(path, "wb") as f:
            tomli_w.dump(data, f)

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value by dotted key (e.g., "roles.timeout_seconds").

        Args:
            key: Configuration key
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        attr = CONFIG_KEYS.get(key)
        if attr is None:
            return default

        value = getattr(self, attr)
        if isinstance(value, Path):
            return str(value)
        return value

    def set(self, key: str, value: str) -> None:
        """Set a configuration value by dotted key.

        The string value is converted to the type of the current value.
        Lists are given as comma-separated strings.

        Args:
            key: Configuration key
            value: Configuration value

        Raises:
            ValueError: If the key is unknown or the value can't be converted
        """
        attr = CONFIG_KEYS.get(key)
        if attr is None:
            raise ValueError(f"Invalid config key: {key}")

        current = getattr(self, attr)
        if isinstance(current, bool):
            new_value: Any = value.lower() in ("true", "1", "yes")
        elif isinstance(current, int):
            new_value = int(value)
        elif isinstance(current, float):
            new_value = float(value)
        elif isinstance(current, Path):
            new_value = Path(value)
        elif isinstance(current, list):
            new_value = [item.strip() for item in value.split(",") if item.strip()]
        else:
            new_value = value

        setattr(self, attr, new_value)

    @property
    def has_firebase(self) -> bool:
        """Check whether a Realtime Database URL is configured."""
        return bool(self.firebase_database_url)


def ensure_config_exists(path: Optional[Path] = None) -> HymnalConfig:
    """Ensure config file exists, creating default if needed.

    Args:
        path: Config file location (defaults to standard location)

    Returns:
        HymnalConfig instance
    """
    config_path = path or get_config_path()

    if config_path.exists():
        try:
            return HymnalConfig.load(config_path)
        except (tomllib.TOMLDecodeError, ValueError, TypeError):
            # Corrupted config is replaced with defaults below
            pass

    config = HymnalConfig()
    config.save(config_path)
    config.apply_env_overrides()
    return config
