"""Tests for argument-to-flags conversion."""

# Local/package imports
from hela import to_flags
from hela.flags import to_flag_list


def test_booleans_and_values():
    assert to_flags({"watch": True, "color": False, "outDir": "dist"}) == (
        "--watch --no-color --out-dir=dist"
    )


def test_single_letter_flags():
    assert to_flags({"n": 3, "v": True}) == "-n 3 -v"
    assert to_flags({"n": 3}, allow_single_flags=False) == "--n=3"


def test_lists_repeat_the_flag():
    assert to_flag_list({"tag": ["a", "b"]}) == ["--tag=a", "--tag=b"]


def test_none_is_skipped_and_positionals_go_last():
    argv = {"_": ["src", "tests"], "config": None, "snake_case": "x"}
    assert to_flags(argv) == "--snake-case=x src tests"


def test_values_are_quoted():
    assert to_flags({"message": "hello world"}) == "--message='hello world'"


def test_excludes():
    assert to_flags({"cwd": "/tmp", "fix": True, "_": []}, excludes=("_", "cwd")) == (
        "--fix"
    )
