"""
Execution options shared by the process runner and the batch executors.
"""

import math
from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Union

from ..exceptions import ValidationError


class Stdio(Enum):
    """How a child's standard streams are connected."""

    PIPE = "pipe"  # Captured into the result
    INHERIT = "inherit"  # Shared with the parent process
    IGNORE = "ignore"  # Discarded


@dataclass(frozen=True)
class ExecutionOptions:
    """Options for running one command or a batch of commands.

    Attributes:
        concurrency: Maximum commands in flight, None for unbounded
        shell: Run commands through the system shell
        prefer_local: Resolve executables against project-local bin
            directories before the system PATH
        stdio: How child output streams are connected
        env: Environment variables for the child
        extend_env: Merge ``env`` over the parent environment
        cwd: Working directory for the child
        timeout: Seconds before the child is killed, None to wait forever
        reject: Raise on failure instead of returning a failed result
        strip_final_newline: Drop one trailing newline from captured output
        search_path: Resolved local executable search path
        extra: Additional keyword arguments for the subprocess call
    """

    concurrency: Optional[int] = None
    shell: bool = False
    prefer_local: bool = True
    stdio: Stdio = Stdio.PIPE
    env: Optional[Dict[str, str]] = None
    extend_env: bool = True
    cwd: Optional[str] = None
    timeout: Optional[float] = None
    reject: bool = True
    strip_final_newline: bool = True
    search_path: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        concurrency = self.concurrency
        if concurrency is not None and concurrency == math.inf:
            object.__setattr__(self, "concurrency", None)
        elif concurrency is not None and (
            isinstance(concurrency, bool)
            or not isinstance(concurrency, int)
            or concurrency < 1
        ):
            raise ValidationError(
                "Concurrency must be a positive integer or unbounded",
                "concurrency",
                concurrency,
            )

        if not isinstance(self.stdio, Stdio):
            try:
                object.__setattr__(self, "stdio", Stdio(self.stdio))
            except ValueError as e:
                raise ValidationError(
                    f"Unknown stdio mode: {self.stdio!r}", "stdio", self.stdio
                ) from e

        if self.timeout is not None and self.timeout <= 0:
            raise ValidationError("Timeout must be positive", "timeout", self.timeout)

    @classmethod
    def field_names(cls):
        return {f.name for f in fields(cls)} - {"extra"}

    def merge(
        self,
        other: Optional[Union["ExecutionOptions", Mapping[str, Any]]] = None,
        **overrides: Any,
    ) -> "ExecutionOptions":
        """Return a copy with ``other`` and ``overrides`` applied on top.

        Mappings override field by field; unknown keys go to ``extra``. An
        ``ExecutionOptions`` instance replaces every field.
        """
        if isinstance(other, ExecutionOptions):
            base = other
        else:
            base = self
            overrides = {**dict(other or {}), **overrides}

        known = self.field_names()
        changes = {k: v for k, v in overrides.items() if k in known}
        extra = dict(overrides.get("extra") or {})
        extra.update(
            {k: v for k, v in overrides.items() if k not in known and k != "extra"}
        )
        if extra:
            changes["extra"] = {**base.extra, **extra}

        return replace(base, **changes) if changes else base
