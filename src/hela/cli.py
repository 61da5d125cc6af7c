"""
Command line entry point: loads the project's tasks file and runs it.
"""

# Standard library imports
import importlib.util
import sys
from pathlib import Path
from typing import List, Optional

import click
from dotenv import load_dotenv

from .config import get_config
from .exceptions import (
    CommandExecutionError,
    HelaError,
    TaskExecutionError,
    TasksFileError,
)
from .tasks import Hela
from .utils.logger import get_logger, set_logger

logger = get_logger(__name__)


def load_environment_variables(env_path: Path) -> None:
    """Load environment variables from a .env file if it exists."""
    if env_path.exists():
        load_dotenv(env_path)
        logger.debug("Loaded environment from %s", env_path)


def load_program(tasks_file: Path) -> Hela:
    """Import ``tasks_file`` and return the program it defines.

    The module must expose a :class:`Hela` instance, preferably as
    ``program``.

    Raises:
        TasksFileError: If the file is missing or defines no program
    """
    if not tasks_file.is_file():
        raise TasksFileError(
            f"Tasks file not found: {tasks_file}", config_path=str(tasks_file)
        )

    spec = importlib.util.spec_from_file_location("hela_tasks", tasks_file)
    if spec is None or spec.loader is None:
        raise TasksFileError(
            f"Cannot import tasks file: {tasks_file}", config_path=str(tasks_file)
        )
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    program = getattr(module, "program", None)
    if not isinstance(program, Hela):
        program = next(
            (value for value in vars(module).values() if isinstance(value, Hela)),
            None,
        )
    if program is None:
        raise TasksFileError(
            f"No hela program defined in {tasks_file}", config_path=str(tasks_file)
        )
    return program


def _report_task_error(error: TaskExecutionError) -> None:
    error_msg = f"✗ {error.message}"
    cause = error.cause
    if isinstance(cause, CommandExecutionError):
        error_msg += f"\nCommand: {cause.command}"
        if cause.stderr:
            error_msg += f"\n{cause.stderr}"
    click.secho(error_msg, fg="red", err=True)


def run(argv: Optional[List[str]] = None) -> int:
    """Run the CLI and return the process exit code."""
    cwd = Path.cwd()
    load_environment_variables(cwd / ".env")

    try:
        config = get_config(force_refresh=True)
        set_logger(log_file=config.log_file, verbose=config.verbose, debug=config.debug)
        program = load_program(cwd / config.tasks_file)
        program.run(argv)
    except TaskExecutionError as e:
        logger.debug("Task failed", exc_info=e)
        _report_task_error(e)
        return 1
    except click.ClickException as e:
        e.show()
        return e.exit_code
    except click.Abort:
        click.secho("Aborted!", fg="red", err=True)
        return 1
    except HelaError as e:
        click.secho(f"✗ {e.message}", fg="red", err=True)
        return 1
    except KeyboardInterrupt:
        click.echo("\nOperation cancelled by user", err=True)
        return 1
    return 0


def main() -> None:
    """Entry point for the ``hela`` command."""
    sys.exit(run(sys.argv[1:]))


if __name__ == "__main__":
    main()
