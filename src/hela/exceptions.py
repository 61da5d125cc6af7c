"""
Custom exceptions for hela.

The hierarchy is organized as follows:

- HelaError: Base exception for all hela errors
  - CommandExecutionError: A single command exited non-zero, was killed,
    timed out or could not be started
    - BatchExecutionError: First failing command of a batch
  - TaskExecutionError: A registered task's handler failed
  - TaskDefinitionError: A task was registered incorrectly
  - ConfigurationError: Invalid configuration
    - TasksFileError: The project's tasks file could not be loaded
  - ValidationError: Invalid option value
"""

from typing import Any, Dict, List, Optional


class HelaError(Exception):
    """Base exception for all hela errors."""

    def __init__(
        self,
        message: str,
        *args: Any,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.error_code = error_code or "HELA_ERROR"
        self.context = context or {}
        super().__init__(message, *args)

    def __str__(self) -> str:
        error_msg = f"[{self.error_code}] {self.message}"
        if self.context:
            error_msg += f"\nContext: {self.context}"
        return error_msg


class CommandExecutionError(HelaError):
    """Error raised when a command fails."""

    def __init__(
        self,
        command: str,
        exit_code: Optional[int] = None,
        stdout: str = "",
        stderr: str = "",
        signal: Optional[str] = None,
        killed: bool = False,
        timed_out: bool = False,
        message: Optional[str] = None,
        error_code: str = "COMMAND_EXECUTION_ERROR",
    ):
        """Initialize with command details.

        Args:
            command: The literal command that failed
            exit_code: Exit code of the process, None if it never started
                or was terminated by a signal
            stdout: Captured standard output
            stderr: Captured standard error
            signal: Name of the terminating signal, if any
            killed: Whether the process was killed by hela
            timed_out: Whether the process exceeded its timeout
            message: Human-readable message, derived from the fields if omitted
        """
        self.command = command
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr
        self.signal = signal
        self.killed = killed
        self.timed_out = timed_out

        super().__init__(
            message or self.describe_failure(command, exit_code, signal, timed_out),
            error_code=error_code,
            context={
                "command": command,
                "exit_code": exit_code,
                "signal": signal,
                "timed_out": timed_out,
            },
        )

    @staticmethod
    def describe_failure(
        command: str,
        exit_code: Optional[int],
        signal: Optional[str],
        timed_out: bool,
    ) -> str:
        if timed_out:
            return f"Command timed out: {command}"
        if signal:
            return f"Command was killed with {signal}: {command}"
        if exit_code is None:
            return f"Command could not be started: {command}"
        return f"Command failed with exit code {exit_code}: {command}"


class BatchExecutionError(CommandExecutionError):
    """First failing command of a batch, in input order."""

    def __init__(self, error: CommandExecutionError, index: int, total: int):
        self.index = index
        self.total = total
        super().__init__(
            command=error.command,
            exit_code=error.exit_code,
            stdout=error.stdout,
            stderr=error.stderr,
            signal=error.signal,
            killed=error.killed,
            timed_out=error.timed_out,
            message=error.message,
            error_code="BATCH_EXECUTION_ERROR",
        )
        self.context.update({"index": index, "total": total})


class TaskExecutionError(HelaError):
    """Raised when a task handler fails, enriched with its invocation."""

    def __init__(
        self,
        command_name: str,
        command_argv: Dict[str, Any],
        command_args: List[str],
        cause: Exception,
    ):
        self.command_name = command_name
        self.command_argv = command_argv
        self.command_args = command_args
        self.cause = cause
        reason = cause.message if isinstance(cause, HelaError) else str(cause)
        super().__init__(
            f"Task '{command_name}' failed: {reason}",
            error_code="TASK_EXECUTION_ERROR",
            context={"task": command_name, "args": command_args},
        )


class TaskDefinitionError(HelaError):
    """Raised when a task is registered incorrectly."""

    def __init__(self, message: str, task_name: Optional[str] = None):
        super().__init__(
            message,
            error_code="TASK_DEFINITION_ERROR",
            context={"task": task_name} if task_name else None,
        )


class ConfigurationError(HelaError):
    """Raised when there's an error in the configuration."""

    def __init__(self, message: str, *args: Any, config_path: Optional[str] = None):
        super().__init__(
            message,
            *args,
            error_code="CONFIG_ERROR",
            context={"config_path": config_path} if config_path else None,
        )


class TasksFileError(ConfigurationError):
    """Raised when the project's tasks file cannot be loaded."""


class ValidationError(HelaError):
    """Raised when validation fails."""

    def __init__(self, message: str, field: str, value: Any, *args: Any):
        self.field = field
        self.value = value
        super().__init__(
            message,
            *args,
            error_code="VALIDATION_ERROR",
            context={"field": field, "value": value},
        )
