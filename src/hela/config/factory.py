"""Configuration factory module."""

# Standard library imports
from typing import Optional

# Local imports
from .base import HelaConfig

_instance: Optional[HelaConfig] = None


def get_config(force_refresh: bool = False) -> HelaConfig:
    """Get global configuration instance.

    Args:
        force_refresh: If True, create a new config instance even if one exists

    Returns:
        HelaConfig instance
    """
    global _instance
    if force_refresh or _instance is None:
        _instance = HelaConfig()
    return _instance


def clear_config() -> None:
    """Clear global configuration instance."""
    global _instance
    _instance = None
