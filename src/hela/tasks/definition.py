"""
Task definitions and the builder used to register them.
"""

import asyncio
import os
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

from ..exceptions import TaskDefinitionError

DEFAULT_TASK = "__default__"

Handler = Callable[[Dict[str, Any]], Any]


@dataclass
class TaskOption:
    """A flag accepted by a task, e.g. ``("--watch", "-w")``."""

    flags: Tuple[str, ...]
    description: str = ""
    default: Any = None

    @property
    def dest(self) -> str:
        """Name of the parsed value, taken from the first long flag."""
        long_flags = [flag for flag in self.flags if flag.startswith("--")]
        name = (long_flags or list(self.flags))[0]
        return name.lstrip("-").replace("-", "_").lower()

    @property
    def is_flag(self) -> bool:
        return isinstance(self.default, bool)

    @property
    def declarations(self) -> List[str]:
        """Parser declarations; boolean long flags also accept ``--no-<flag>``."""
        if not self.is_flag:
            return list(self.flags)
        return [
            f"{flag}/--no-{flag[2:]}" if flag.startswith("--") else flag
            for flag in self.flags
        ]


@dataclass
class TaskDefinition:
    """A named unit of CLI functionality."""

    name: str
    description: str = ""
    options: List[TaskOption] = field(default_factory=list)
    handler: Optional[Handler] = None

    @property
    def defaults(self) -> Dict[str, Any]:
        return {option.dest: option.default for option in self.options}

    def build_argv(
        self, parsed: Dict[str, Any], args: Sequence[str] = ()
    ) -> Dict[str, Any]:
        """Argument mapping handed to the handler.

        Starts from the option defaults with the task name as the only
        positional, then applies whatever the parser produced.
        """
        argv: Dict[str, Any] = {**self.defaults, "_": [self.name]}
        argv.update({k: v for k, v in parsed.items() if v is not None})
        if args:
            argv["_"] = list(args)
        return argv

    def invoke(self, argv: Dict[str, Any]) -> Any:
        """Call the handler, running it to completion if it is a coroutine.

        Coroutine handlers get their own event loop, so this must be called
        from synchronous code.
        """
        if self.handler is None:
            raise TaskDefinitionError(f"Task '{self.name}' has no action", self.name)
        result = self.handler(argv)
        if not asyncio.iscoroutine(result):
            return result
        if _loop_is_running():
            result.close()
            raise TaskDefinitionError(
                f"Task '{self.name}' is async and cannot run inside a running "
                "event loop; call run() from synchronous code",
                self.name,
            )
        return asyncio.run(result)


def _loop_is_running() -> bool:
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return False
    return True


class TaskBuilder:
    """Declares the description, options and action of one task."""

    def __init__(self, name: str):
        self.definition = TaskDefinition(name=name)

    def describe(self, text: str) -> "TaskBuilder":
        self.definition.description = text
        return self

    def option(
        self,
        flags: Union[str, Sequence[str]],
        description: str = "",
        default: Any = None,
    ) -> "TaskBuilder":
        """Declare an option; ``flags`` is ``"--out-dir, -o"`` or a sequence."""
        if isinstance(flags, str):
            flags = [flag.strip() for flag in flags.split(",")]
        flags = tuple(flag for flag in flags if flag)
        if not flags or not all(flag.startswith("-") for flag in flags):
            raise TaskDefinitionError(
                f"Invalid option flags {flags!r}", self.definition.name
            )
        option = TaskOption(flags, description, default)
        if not option.dest.isidentifier():
            raise TaskDefinitionError(
                f"Option {flags!r} does not map to a valid name", self.definition.name
            )
        self.definition.options.append(option)
        return self

    def action(self, handler: Handler) -> "TaskBuilder":
        """Attach the handler; every task with an action accepts ``--cwd``."""
        if not callable(handler):
            raise TaskDefinitionError(
                "Task action must be callable", self.definition.name
            )
        self.definition.handler = handler
        if "cwd" not in self.definition.defaults:
            self.option("--cwd", "Current working directory", os.getcwd())
        return self

    def build(self) -> TaskDefinition:
        if self.definition.handler is None:
            raise TaskDefinitionError(
                f"Task '{self.definition.name}' has no action", self.definition.name
            )
        return self.definition
