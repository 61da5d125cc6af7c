"""
Task runner package.
"""

from .definition import DEFAULT_TASK, TaskBuilder, TaskDefinition, TaskOption
from .program import Hela, hela

__all__ = [
    "DEFAULT_TASK",
    "Hela",
    "TaskBuilder",
    "TaskDefinition",
    "TaskOption",
    "hela",
]
