"""
Batch command execution in parallel or in series.
"""

from typing import Any, Iterable, List, Mapping, Optional, Tuple, Union

from ..config.paths import resolve_search_path
from ..exceptions import BatchExecutionError, CommandExecutionError
from ..utils.logger import get_context_logger
from .mapping import map_with_concurrency
from .options import ExecutionOptions
from .runner import ExecutionResult, ProcessRunner

Commands = Union[str, Iterable[Optional[str]], None]
OptionsLike = Union[ExecutionOptions, Mapping[str, Any], None]


def normalize_commands(commands: Commands) -> List[str]:
    """Turn one command or a sequence of commands into a list of commands.

    Falsy entries are dropped; the input itself is never modified.
    """
    if isinstance(commands, str):
        commands = [commands]
    return [command for command in (commands or []) if command]


class CommandBatchExecutor:
    """Runs commands through a :class:`ProcessRunner` under a concurrency limit."""

    def __init__(
        self,
        options: OptionsLike = None,
        runner: Optional[ProcessRunner] = None,
    ):
        self.options = ExecutionOptions().merge(options)
        self.runner = runner or ProcessRunner()
        self.logger = get_context_logger(
            __name__, executor=self.__class__.__name__
        )

    def effective_options(self, options: OptionsLike = None) -> ExecutionOptions:
        """Options for one batch: executor defaults overridden by ``options``."""
        effective = self.options.merge(options)
        if effective.prefer_local and effective.search_path is None:
            effective = effective.merge(search_path=resolve_search_path(effective.cwd))
        return effective

    async def execute(
        self, commands: Commands, options: OptionsLike = None
    ) -> List[ExecutionResult]:
        """Execute ``commands`` and return their results in input order.

        Args:
            commands: A command string or a sequence of command strings
            options: Overrides for this batch

        Returns:
            One result per non-empty command, in input order

        Raises:
            BatchExecutionError: For the first failing command in input order
        """
        batch = normalize_commands(commands)
        effective = self.effective_options(options)

        # concurrency is a batch-level setting, the runner never sees it
        run_options = effective.merge(concurrency=None)

        self.logger.debug(
            "Executing %d command(s)",
            len(batch),
            extra={"concurrency": effective.concurrency, "shell": effective.shell},
        )

        async def run_one(entry: Tuple[int, str]) -> ExecutionResult:
            index, command = entry
            try:
                return await self.runner.run(command, run_options)
            except CommandExecutionError as e:
                raise BatchExecutionError(e, index=index, total=len(batch)) from e

        try:
            results = await map_with_concurrency(
                enumerate(batch), run_one, concurrency=effective.concurrency
            )
        except BatchExecutionError as e:
            self.logger.error(
                "Batch failed at command %d of %d: %s",
                e.index + 1,
                e.total,
                e.message,
            )
            raise

        self.logger.debug("Executed %d command(s)", len(results))
        return results


class ShellExecutor(CommandBatchExecutor):
    """Batch executor that always runs commands through the system shell.

    The shell gives commands access to environment variable expansion, pipes,
    globs and builtins such as ``exit``.
    """

    def effective_options(self, options: OptionsLike = None) -> ExecutionOptions:
        return super().effective_options(options).merge(shell=True)


async def execute(
    commands: Commands, options: OptionsLike = None, **overrides: Any
) -> List[ExecutionResult]:
    """Execute commands in parallel (default) or in series.

    Pass ``concurrency=1`` to run in series. Commands are invoked directly,
    without a shell.

    Example:
        await execute("echo hello world", stdio="inherit")

        await execute(
            ["black --check src", "pylint src"],
            concurrency=1,
            stdio="inherit",
        )
    """
    return await CommandBatchExecutor().execute(
        commands, ExecutionOptions().merge(options).merge(overrides)
    )


async def shell(
    commands: Commands, options: OptionsLike = None, **overrides: Any
) -> List[ExecutionResult]:
    """Like :func:`execute`, but commands run through the system shell.

    Example:
        await shell(["echo unicorns", 'echo "foo-$HOME-bar"'], concurrency=1)
    """
    return await ShellExecutor().execute(
        commands, ExecutionOptions().merge(options).merge(overrides)
    )
