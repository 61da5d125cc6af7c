"""Base configuration types."""

# Standard library imports
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

# Local imports
from ..exceptions import ConfigurationError, ValidationError
from ..execution.options import ExecutionOptions, Stdio
from .paths import get_root
from .validation import ConfigValidator

ENV_PREFIX = "HELA_"


@dataclass
class HelaConfig:
    """Configuration for the task runner, overridable with ``HELA_*`` variables.

    ``concurrency`` of 0 and ``timeout`` of 0 mean unbounded.
    """

    # Execution defaults for tasks
    concurrency: int = field(default=1)
    stdio: str = field(default=Stdio.INHERIT.value)
    prefer_local: bool = field(default=True)
    timeout: float = field(default=0.0)

    # Program settings
    program_name: str = field(default="hela")
    tasks_file: str = field(default="hela_tasks.py")

    # Log settings
    log_file: Optional[Path] = field(default=None)
    verbose: bool = field(default=False)
    debug: bool = field(default=False)

    def __post_init__(self):
        """Load overrides from the environment and validate."""
        self._validator = ConfigValidator()
        self._load_from_env()
        self._setup_validation()
        self._validate()

    def _load_from_env(self) -> None:
        """Load configuration from environment variables."""
        for field_name, field_value in self.__class__.__dataclass_fields__.items():
            env_key = f"{ENV_PREFIX}{field_name.upper()}"
            env_value = os.getenv(env_key)

            if env_value is None:
                continue

            # Strip any comments and whitespace
            env_value = env_value.split("#")[0].strip()

            field_type = field_value.type
            try:
                if field_type is bool:
                    value = env_value.lower() in ("true", "1", "yes", "on")
                elif field_type == Optional[Path]:
                    path = Path(os.path.expanduser(env_value))
                    if not path.is_absolute():
                        path = get_root() / path
                    value = path
                elif field_type in (int, float):
                    value = field_type(env_value)
                else:
                    value = field_type(env_value)

                setattr(self, field_name, value)
            except (TypeError, ValueError) as e:
                raise ConfigurationError(
                    f"Invalid value for {env_key}: {env_value} - {str(e)}"
                ) from e

    def _setup_validation(self):
        """Set up validation rules."""
        self._validator.add_type_rule("concurrency", int)
        self._validator.add_range_rule("concurrency", 0, None)
        self._validator.add_type_rule("timeout", (int, float))
        self._validator.add_range_rule("timeout", 0, None)
        self._validator.add_choice_rule("stdio", [mode.value for mode in Stdio])
        self._validator.add_type_rule("tasks_file", str)
        self._validator.add_type_rule("program_name", str)

    def _validate(self) -> None:
        """Validate configuration values."""
        try:
            self._validator.validate(self.to_dict())
        except ValidationError as e:
            raise ConfigurationError(e.message) from e

    def to_dict(self) -> Dict[str, Any]:
        return {name: getattr(self, name) for name in self.__dataclass_fields__}

    def execution_options(self, **overrides: Any) -> ExecutionOptions:
        """Execution defaults for commands run from tasks."""
        options = ExecutionOptions(
            concurrency=self.concurrency or None,
            stdio=Stdio(self.stdio),
            prefer_local=self.prefer_local,
            timeout=self.timeout or None,
            env=dict(os.environ),
        )
        return options.merge(overrides)
