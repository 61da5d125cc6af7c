"""
Command execution package.
"""

from .executor import CommandBatchExecutor, ShellExecutor, execute, shell
from .mapping import map_with_concurrency
from .options import ExecutionOptions, Stdio
from .runner import ExecutionResult, ProcessRunner, run_command

__all__ = [
    "CommandBatchExecutor",
    "ExecutionOptions",
    "ExecutionResult",
    "ProcessRunner",
    "ShellExecutor",
    "Stdio",
    "execute",
    "map_with_concurrency",
    "run_command",
    "shell",
]
