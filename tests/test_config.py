"""Tests for configuration management."""

# Standard library imports
import os
from pathlib import Path

# Third-party imports
import pytest

# Local/package imports
from hela.config import (
    HelaConfig,
    clear_config,
    get_config,
    get_root,
    local_bin_dirs,
    resolve_search_path,
)
from hela.exceptions import ConfigurationError, ValidationError
from hela.execution import ExecutionOptions, Stdio


def test_default_config():
    """Test default configuration values."""
    config = HelaConfig()

    assert config.concurrency == 1
    assert config.stdio == "inherit"
    assert config.prefer_local is True
    assert config.timeout == 0.0
    assert config.tasks_file == "hela_tasks.py"
    assert config.log_file is None


def test_env_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("HELA_CONCURRENCY", "4")
    monkeypatch.setenv("HELA_STDIO", "pipe")
    monkeypatch.setenv("HELA_PREFER_LOCAL", "false")
    monkeypatch.setenv("HELA_TIMEOUT", "2.5  # seconds")
    monkeypatch.setenv("HELA_LOG_FILE", str(tmp_path / "hela.log"))

    config = HelaConfig()

    assert config.concurrency == 4
    assert config.stdio == "pipe"
    assert config.prefer_local is False
    assert config.timeout == 2.5
    assert config.log_file == tmp_path / "hela.log"


def test_invalid_env_value(monkeypatch):
    monkeypatch.setenv("HELA_CONCURRENCY", "many")
    with pytest.raises(ConfigurationError):
        HelaConfig()


@pytest.mark.parametrize(
    "key, value", [("HELA_STDIO", "tty"), ("HELA_CONCURRENCY", "-2")]
)
def test_validation(monkeypatch, key, value):
    monkeypatch.setenv(key, value)
    with pytest.raises(ConfigurationError):
        HelaConfig()


def test_get_config_singleton(monkeypatch):
    first = get_config()
    assert get_config() is first

    monkeypatch.setenv("HELA_CONCURRENCY", "3")
    assert get_config().concurrency == 1
    assert get_config(force_refresh=True).concurrency == 3

    clear_config()
    assert get_config() is not first


def test_execution_options_from_config():
    options = HelaConfig().execution_options(stdio="pipe")

    assert options.concurrency == 1
    assert options.stdio is Stdio.PIPE
    assert options.prefer_local is True
    assert options.timeout is None
    assert options.env == dict(os.environ)


def test_unbounded_concurrency_from_config(monkeypatch):
    monkeypatch.setenv("HELA_CONCURRENCY", "0")
    assert HelaConfig().execution_options().concurrency is None


class TestExecutionOptions:
    """Test suite for ExecutionOptions."""

    def test_defaults(self):
        options = ExecutionOptions()

        assert options.concurrency is None
        assert options.shell is False
        assert options.prefer_local is True
        assert options.stdio is Stdio.PIPE

    def test_merge_is_field_by_field(self):
        base = ExecutionOptions(cwd="/tmp", concurrency=2)
        merged = base.merge({"shell": True}, stdio="inherit")

        assert merged.cwd == "/tmp"
        assert merged.concurrency == 2
        assert merged.shell is True
        assert merged.stdio is Stdio.INHERIT
        assert base.shell is False

    def test_unknown_keys_go_to_extra(self):
        merged = ExecutionOptions(extra={"a": 1}).merge(start_new_session=True)
        assert merged.extra == {"a": 1, "start_new_session": True}

    def test_merge_with_instance(self):
        other = ExecutionOptions(shell=True)
        assert ExecutionOptions(cwd="/tmp").merge(other) is other

    @pytest.mark.parametrize("concurrency", [0, -3, 2.5, False])
    def test_invalid_concurrency(self, concurrency):
        with pytest.raises(ValidationError):
            ExecutionOptions(concurrency=concurrency)

    def test_invalid_stdio(self):
        with pytest.raises(ValidationError):
            ExecutionOptions(stdio="tty")


class TestPaths:
    """Test suite for path discovery."""

    def test_local_bin_dirs_nearest_first(self, local_bin):
        nested = local_bin / "pkg" / "sub"
        nested.mkdir(parents=True)
        (local_bin / "pkg" / "node_modules" / ".bin").mkdir(parents=True)

        dirs = local_bin_dirs(nested)

        assert dirs.index((local_bin / "pkg" / "node_modules" / ".bin").resolve()) < dirs.index(
            (local_bin / ".venv" / "bin").resolve()
        )

    def test_search_path_is_pathsep_joined(self, local_bin):
        search_path = resolve_search_path(local_bin)
        assert search_path.split(os.pathsep)[0] == str(
            (local_bin / ".venv" / "bin").resolve()
        )

    def test_root_from_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("HELA_PROJECT_ROOT", str(tmp_path))
        assert get_root() == tmp_path.resolve()

    def test_root_from_pyproject(self, monkeypatch, tmp_path):
        (tmp_path / "pyproject.toml").write_text("[project]\nname = 'x'\n")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)

        assert get_root() == Path(tmp_path).resolve()
