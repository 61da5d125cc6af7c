"""
Configuration record for the external build/test runner.
"""

import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

MODULE_TARGET = "module"
MAIN_TARGET = "main"


@dataclass
class BuildConfig:
    """Runner configuration; ``to_dict`` gives the record the runner reads."""

    display_name: str
    test_match: List[str]
    out_dir: str
    root_dir: Optional[str] = None
    test_environment: str = "node"
    test_path_ignore_patterns: List[str] = field(
        default_factory=lambda: [".+/__tests__/.+", ".+/dist/.+"]
    )
    runner: str = "@tunnckocore/jest-runner-babel"
    module_file_extensions: List[str] = field(
        default_factory=lambda: ["ts", "tsx", "js", "jsx", "mjs", "json"]
    )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "displayName": self.display_name,
            "testEnvironment": self.test_environment,
            "testMatch": list(self.test_match),
            "testPathIgnorePatterns": list(self.test_path_ignore_patterns),
            "haste": {self.runner: {"outDir": self.out_dir}},
            "runner": self.runner,
            "moduleFileExtensions": list(self.module_file_extensions),
            "rootDir": self.root_dir,
        }


def create_build_config(
    cwd: Optional[str] = None,
    mono: bool = False,
    target: Optional[str] = None,
) -> BuildConfig:
    """Create the build runner configuration.

    Args:
        cwd: Root directory for the runner
        mono: Whether the project is a multi-package repository
        target: ``"module"`` or ``"main"``, read from ``HELA_BUILD_TARGET``
            when omitted
    """
    target = target or os.getenv("HELA_BUILD_TARGET") or MAIN_TARGET
    is_module = target == MODULE_TARGET
    match = "packages/*/src/**/*" if mono else "src/**/*"

    return BuildConfig(
        display_name="build:esm" if is_module else "build:cjs",
        test_match=[f"<rootDir>/{match}"],
        out_dir="dist/build/module" if is_module else "dist/build/main",
        root_dir=cwd,
    )
