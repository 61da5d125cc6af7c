"""Project path discovery utilities."""

import os
import sysconfig
from functools import lru_cache
from pathlib import Path
from typing import List, Optional, Union

# Per-directory locations of locally installed executables
LOCAL_BIN_DIRS = (".venv/bin", "venv/bin", "node_modules/.bin")


@lru_cache(maxsize=1)
def get_root() -> Path:
    """Get project root directory for loading .env and tasks files.

    1. Check environment variable HELA_PROJECT_ROOT
    2. Walk up from the current working directory until we find pyproject.toml
    3. Fallback to current working directory

    Returns:
        Path: Project root directory
    """
    if root_env := os.getenv("HELA_PROJECT_ROOT"):
        root_path = Path(root_env).resolve()
        if root_path.exists():
            return root_path

    current = Path.cwd().resolve()
    for parent in (current, *current.parents):
        if (parent / "pyproject.toml").exists():
            return parent

    return Path.cwd()


def clear_root() -> None:
    """Clear the project root cache."""
    get_root.cache_clear()


def local_bin_dirs(start: Optional[Union[str, Path]] = None) -> List[Path]:
    """List directories holding project-local executables.

    Every ancestor of ``start`` (nearest first) contributes its existing
    ``LOCAL_BIN_DIRS``, followed by the running interpreter's scripts
    directory.
    """
    current = Path(start or Path.cwd()).resolve()
    dirs: List[Path] = []

    for parent in (current, *current.parents):
        for name in LOCAL_BIN_DIRS:
            candidate = parent / name
            if candidate.is_dir() and candidate not in dirs:
                dirs.append(candidate)

    scripts = sysconfig.get_path("scripts")
    if scripts and Path(scripts).is_dir() and Path(scripts) not in dirs:
        dirs.append(Path(scripts))

    return dirs


def resolve_search_path(start: Optional[Union[str, Path]] = None) -> str:
    """Join :func:`local_bin_dirs` into a PATH-style string.

    The result is meant to be computed once and handed to the process runner
    through ``ExecutionOptions.search_path``; ``os.environ`` is never touched.
    """
    return os.pathsep.join(str(d) for d in local_bin_dirs(start))
