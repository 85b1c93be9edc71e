"""Core utilities for Hymnal."""

from hymnal.core.config import HymnalConfig
from hymnal.core.paths import (
    get_cache_dir,
    get_config_dir,
    get_user_data_dir,
)

__all__ = ["HymnalConfig", "get_cache_dir", "get_config_dir", "get_user_data_dir"]
