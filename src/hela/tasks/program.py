"""
Task runner: registers named tasks and dispatches one per invocation.
"""

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

import click

from .._version import __version__
from ..config import HelaConfig, get_config, resolve_search_path
from ..exceptions import TaskDefinitionError, TaskExecutionError
from ..execution import CommandBatchExecutor, ExecutionResult, ShellExecutor
from ..execution.executor import Commands
from ..utils.logger import get_context_logger
from .definition import DEFAULT_TASK, Handler, TaskBuilder, TaskDefinition


@dataclass
class Dispatch:
    """A parsed invocation that resolved to a task."""

    task: TaskDefinition
    options: Dict[str, Any]
    args: Tuple[str, ...]


class Hela:
    """Program object holding the task registry.

    Example:
        program = hela()

        def build(task):
            task.describe("Build the project")
            task.option("--watch, -w", "Rebuild on change", False)
            task.action(lambda argv: program.shell("make build"))

        program.define_task("build", build)
        program.run()
    """

    def __init__(
        self,
        name: Optional[str] = None,
        version: str = __version__,
        config: Optional[HelaConfig] = None,
    ):
        self.config = config or get_config()
        self.name = name or self.config.program_name
        self.version = version
        self.tasks: Dict[str, TaskDefinition] = {}
        # Computed once, passed to every command run by a task
        self.search_path = resolve_search_path(Path.cwd())
        self.logger = get_context_logger(__name__, program=self.name)

    # Registration

    def define_task(
        self,
        name: Optional[str],
        register: Callable[[TaskBuilder], Any],
    ) -> TaskDefinition:
        """Register a task under ``name``, or as the default task if None."""
        task_name = name or DEFAULT_TASK
        if task_name in self.tasks:
            raise TaskDefinitionError(f"Task '{task_name}' is already defined", task_name)

        builder = TaskBuilder(task_name)
        register(builder)
        definition = builder.build()
        self.tasks[task_name] = definition
        self.logger.debug("Registered task %s", task_name)
        return definition

    def task(
        self,
        name: Optional[str] = None,
        description: str = "",
        options: Iterable[Tuple[Any, ...]] = (),
    ) -> Callable[[Handler], Handler]:
        """Decorator form of :meth:`define_task`.

        ``options`` holds ``(flags, description, default)`` tuples.
        """

        def decorator(handler: Handler) -> Handler:
            def register(builder: TaskBuilder) -> None:
                builder.describe(description or (handler.__doc__ or "").strip())
                for option in options:
                    builder.option(*option)
                builder.action(handler)

            self.define_task(name, register)
            return handler

        return decorator

    # Command helpers for task handlers

    async def exec(self, commands: Commands, **overrides: Any) -> List[ExecutionResult]:
        """Run commands with the program's execution defaults."""
        options = self.config.execution_options(search_path=self.search_path)
        return await CommandBatchExecutor(options).execute(commands, overrides)

    async def shell(self, commands: Commands, **overrides: Any) -> List[ExecutionResult]:
        """Like :meth:`exec`, but through the system shell."""
        options = self.config.execution_options(search_path=self.search_path)
        return await ShellExecutor(options).execute(commands, overrides)

    # Parsing and dispatch

    def _params(self, definition: TaskDefinition) -> List[click.Parameter]:
        # Name each parameter after its dest so parsed keys match the defaults.
        return [
            click.Option(
                [option.dest, *option.declarations],
                default=option.default,
                help=option.description,
                is_flag=option.is_flag,
                show_default=True,
            )
            for option in definition.options
        ]

    def _build_command(self, definition: TaskDefinition) -> click.Command:
        def callback(args: Tuple[str, ...] = (), **options: Any) -> Dispatch:
            return Dispatch(definition, options, tuple(args))

        params = self._params(definition)
        params.append(click.Argument(["args"], nargs=-1, type=click.UNPROCESSED))
        return click.Command(
            definition.name,
            callback=callback,
            params=params,
            help=definition.description,
        )

    def _build_group(self) -> click.Group:
        default = self.tasks.get(DEFAULT_TASK)

        def callback(**options: Any) -> Optional[Dispatch]:
            ctx = click.get_current_context()
            if ctx.invoked_subcommand is None and default is not None:
                return Dispatch(default, options, ())
            return None

        group = click.Group(
            self.name,
            callback=callback,
            params=self._params(default) if default else [],
            help=default.description if default else None,
            invoke_without_command=True,
        )
        click.version_option(self.version, prog_name=self.name)(group)

        for definition in self.tasks.values():
            if definition.name != DEFAULT_TASK:
                group.add_command(self._build_command(definition))
        return group

    def parse(self, argv: Optional[Sequence[str]] = None) -> Optional[Dispatch]:
        """Resolve ``argv`` to a task, None when nothing matched.

        Raises:
            click.UsageError: For unknown tasks or invalid options
        """
        args = list(sys.argv[1:] if argv is None else argv)
        result = self._build_group().main(
            args=args, prog_name=self.name, standalone_mode=False
        )
        return result if isinstance(result, Dispatch) else None

    def run(self, argv: Optional[Sequence[str]] = None) -> Any:
        """Parse ``argv`` and invoke the matching task's handler.

        Async handlers are run on a fresh event loop, so call this from
        synchronous code rather than from inside a coroutine.

        Returns:
            The handler's result, or None when no task matched

        Raises:
            TaskExecutionError: If the handler fails
        """
        dispatch = self.parse(argv)
        if dispatch is None:
            self.logger.debug("No task matched", extra={"argv": argv})
            return None

        task = dispatch.task
        command_argv = task.build_argv(dispatch.options, dispatch.args)
        command_args = list(dispatch.args)
        self.logger.info("Running task %s", task.name)

        try:
            result = task.invoke(command_argv)
        except Exception as e:
            self.logger.error("Task %s failed: %s", task.name, e)
            raise TaskExecutionError(
                command_name=task.name,
                command_argv=command_argv,
                command_args=command_args,
                cause=e,
            ) from e

        self.logger.debug("Task %s finished", task.name)
        return result


def hela(
    name: Optional[str] = None,
    version: str = __version__,
    config: Optional[HelaConfig] = None,
) -> Hela:
    """Create a program object."""
    return Hela(name=name, version=version, config=config)
