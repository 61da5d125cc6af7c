"""Configuration management."""

# Local imports
from .base import HelaConfig
from .factory import clear_config, get_config
from .paths import clear_root, get_root, local_bin_dirs, resolve_search_path

__all__ = [
    "HelaConfig",
    "get_config",
    "clear_config",
    "get_root",
    "clear_root",
    "local_bin_dirs",
    "resolve_search_path",
]
