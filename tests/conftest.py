"""Shared fixtures for hela tests."""

# Standard library imports
import os

# Third-party imports
import pytest

# Local/package imports
from hela.config import clear_config, clear_root


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Drop HELA_* variables and cached configuration around each test."""
    for key in list(os.environ):
        if key.startswith("HELA_"):
            monkeypatch.delenv(key, raising=False)
    clear_config()
    clear_root()
    yield
    clear_config()
    clear_root()


@pytest.fixture
def local_bin(tmp_path):
    """Project directory with an executable in .venv/bin."""
    bin_dir = tmp_path / ".venv" / "bin"
    bin_dir.mkdir(parents=True)
    script = bin_dir / "hela-local-tool"
    script.write_text("#!/bin/sh\necho local-tool $@\n")
    script.chmod(0o755)
    return tmp_path
