"""
Process runner: spawns one subprocess per command and waits for it.
"""

import asyncio
import os
import shlex
import shutil
import signal
import subprocess
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from ..exceptions import CommandExecutionError
from ..utils.logger import get_context_logger
from .options import ExecutionOptions, Stdio


@dataclass
class ExecutionResult:
    """Result of command execution."""

    command: str
    exit_code: Optional[int] = None
    stdout: str = ""
    stderr: str = ""
    failed: bool = False
    killed: bool = False
    signal: Optional[str] = None
    timed_out: bool = False
    start_time: Optional[float] = None
    end_time: Optional[float] = None

    @property
    def duration(self) -> Optional[float]:
        """Get execution duration in seconds."""
        if self.start_time and self.end_time:
            return self.end_time - self.start_time
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert result to dictionary."""
        return {
            "command": self.command,
            "exit_code": self.exit_code,
            "stdout": self.stdout,
            "stderr": self.stderr,
            "failed": self.failed,
            "killed": self.killed,
            "signal": self.signal,
            "timed_out": self.timed_out,
            "duration": self.duration,
        }

    def to_error(self) -> CommandExecutionError:
        return CommandExecutionError(
            command=self.command,
            exit_code=self.exit_code,
            stdout=self.stdout,
            stderr=self.stderr,
            signal=self.signal,
            killed=self.killed,
            timed_out=self.timed_out,
        )


def _signal_name(returncode: Optional[int]) -> Optional[str]:
    """Name of the signal that terminated a process, POSIX only."""
    if returncode is None or returncode >= 0:
        return None
    try:
        return signal.Signals(-returncode).name
    except ValueError:
        return f"SIG{-returncode}"


def _decode(data: Optional[bytes], strip_final_newline: bool) -> str:
    if not data:
        return ""
    text = data.decode("utf-8", errors="replace")
    if strip_final_newline:
        if text.endswith("\r\n"):
            text = text[:-2]
        elif text.endswith("\n"):
            text = text[:-1]
    return text


class ProcessRunner:
    """Runs a single command string in a child process."""

    def __init__(self):
        self.logger = get_context_logger(__name__, runner=self.__class__.__name__)

    def build_env(self, options: ExecutionOptions) -> Optional[Dict[str, str]]:
        """Environment for the child, None to inherit the parent's unchanged."""
        if options.env is None and options.extend_env and not (
            options.prefer_local and options.search_path
        ):
            return None

        env = os.environ.copy() if options.extend_env else {}
        env.update(options.env or {})

        if options.prefer_local and options.search_path:
            current = env.get("PATH", "")
            env["PATH"] = (
                f"{options.search_path}{os.pathsep}{current}"
                if current
                else options.search_path
            )
        return env

    def _stream_kwargs(self, stdio: Stdio) -> Dict[str, Any]:
        if stdio is Stdio.INHERIT:
            return {"stdin": None, "stdout": None, "stderr": None}
        if stdio is Stdio.IGNORE:
            return {
                "stdin": subprocess.DEVNULL,
                "stdout": subprocess.DEVNULL,
                "stderr": subprocess.DEVNULL,
            }
        return {
            "stdin": subprocess.DEVNULL,
            "stdout": asyncio.subprocess.PIPE,
            "stderr": asyncio.subprocess.PIPE,
        }

    def _split(self, command: str, env: Optional[Dict[str, str]]) -> List[str]:
        argv = shlex.split(command)
        if not argv:
            raise ValueError(f"Empty command: {command!r}")
        search = (env or os.environ).get("PATH")
        resolved = shutil.which(argv[0], path=search)
        if resolved:
            argv[0] = resolved
        return argv

    async def _spawn(
        self, command: str, options: ExecutionOptions, env: Optional[Dict[str, str]]
    ) -> asyncio.subprocess.Process:
        kwargs = {
            **self._stream_kwargs(options.stdio),
            "env": env,
            "cwd": options.cwd,
            **options.extra,
        }
        if options.shell:
            return await asyncio.create_subprocess_shell(command, **kwargs)
        return await asyncio.create_subprocess_exec(
            *self._split(command, env), **kwargs
        )

    async def run(
        self, command: str, options: Optional[ExecutionOptions] = None
    ) -> ExecutionResult:
        """Execute ``command`` and wait for it to finish.

        Raises:
            CommandExecutionError: If the command exits non-zero, is killed,
                times out or cannot be started, unless ``options.reject``
                is False
        """
        options = options or ExecutionOptions()
        env = self.build_env(options)
        result = ExecutionResult(command=command, start_time=time.time())
        log = self.logger.bind(command=command, shell=options.shell)

        try:
            process = await self._spawn(command, options, env)
        except (OSError, ValueError) as e:
            result.end_time = time.time()
            result.failed = True
            result.stderr = str(e)
            log.error("Command could not be started: %s", e)
            if options.reject:
                raise CommandExecutionError(
                    command=command, stderr=str(e)
                ) from e
            return result

        log.debug("Started process %s", process.pid)

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(), timeout=options.timeout
            )
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            stdout, stderr = b"", b""
            result.timed_out = True
            result.killed = True

        result.end_time = time.time()
        result.stdout = _decode(stdout, options.strip_final_newline)
        result.stderr = _decode(stderr, options.strip_final_newline)
        result.signal = _signal_name(process.returncode)
        result.exit_code = process.returncode if result.signal is None else None
        result.failed = bool(result.exit_code or result.signal or result.timed_out)

        log.debug(
            "Process %s finished",
            process.pid,
            extra={"exit_code": result.exit_code, "duration": result.duration},
        )

        if result.failed and options.reject:
            raise result.to_error()
        return result


async def run_command(
    command: str, options: Optional[ExecutionOptions] = None
) -> ExecutionResult:
    """Run a single command with a fresh :class:`ProcessRunner`."""
    return await ProcessRunner().run(command, options)
