"""
Hela - small task runner and command execution helpers.

This module provides the main entry point for the hela package. It re-exports
the command execution helpers and the task runner facade, and carries the
package metadata. The version information is retrieved from the _version.py
file, and overridden by the package metadata when the distribution is
installed.
"""

from importlib import metadata as importlib_metadata
from importlib.metadata import PackageNotFoundError

# Local/package imports
from ._version import __version__
from .build_config import BuildConfig, create_build_config
from .execution import ExecutionOptions, ExecutionResult, Stdio, execute, shell
from .flags import to_flags
from .tasks import Hela, hela
from .utils.logger import get_logger

# Configure package-level logger
package_logger = get_logger(__name__)

__title__ = "hela"


def get_metadata():
    """Extract version and metadata from package distribution when available."""

    global __version__, __title__

    try:
        _meta = importlib_metadata.metadata("hela")
    except PackageNotFoundError:
        return ["__version__", "__title__"]

    __version__ = _meta.get("Version", __version__)
    __title__ = _meta.get("Name", __title__)

    return ["__version__", "__title__"]


__all__ = get_metadata() + [
    "BuildConfig",
    "ExecutionOptions",
    "ExecutionResult",
    "Hela",
    "Stdio",
    "create_build_config",
    "execute",
    "hela",
    "shell",
    "to_flags",
]
