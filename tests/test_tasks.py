"""Tests for task registration and dispatch."""

# Standard library imports
import os

# Third-party imports
import click
import pytest

# Local/package imports
from hela import hela
from hela.exceptions import CommandExecutionError, TaskDefinitionError, TaskExecutionError
from hela.tasks import DEFAULT_TASK, TaskBuilder


@pytest.fixture
def program():
    return hela(version="1.2.3")


class TestTaskBuilder:
    """Test suite for TaskBuilder."""

    def test_action_adds_cwd_option(self):
        definition = TaskBuilder("build").action(lambda argv: None).build()

        assert definition.defaults == {"cwd": os.getcwd()}

    def test_declared_cwd_is_kept(self):
        definition = (
            TaskBuilder("build")
            .option("--cwd", "Where to build", "/srv")
            .action(lambda argv: None)
            .build()
        )
        assert definition.defaults == {"cwd": "/srv"}

    def test_option_flags_from_string(self):
        builder = TaskBuilder("build").option("--out-dir, -o", "Output", "dist")
        option = builder.definition.options[0]

        assert option.flags == ("--out-dir", "-o")
        assert option.dest == "out_dir"

    def test_dest_follows_first_long_flag(self):
        builder = (
            TaskBuilder("build")
            .option("-v, --fo, --foobar", "Two long names", "x")
            .option("-q", "Quiet", False)
        )
        long_option, short_option = builder.definition.options

        assert long_option.dest == "fo"
        assert short_option.dest == "q"

    def test_boolean_options_accept_negation(self):
        builder = TaskBuilder("build").option("--color, -c", "Colour output", True)
        option = builder.definition.options[0]

        assert option.declarations == ["--color/--no-color", "-c"]

    def test_flags_without_a_valid_name(self):
        with pytest.raises(TaskDefinitionError):
            TaskBuilder("build").option("--2x", "Double", False)

    def test_invalid_flags(self):
        with pytest.raises(TaskDefinitionError):
            TaskBuilder("build").option("watch")

    def test_build_requires_action(self):
        with pytest.raises(TaskDefinitionError):
            TaskBuilder("build").describe("No action").build()

    def test_fallback_argv(self):
        definition = (
            TaskBuilder("build")
            .option("--watch", "", False)
            .action(lambda argv: None)
            .build()
        )
        assert definition.build_argv({}) == {
            "watch": False,
            "cwd": os.getcwd(),
            "_": ["build"],
        }


class TestDispatch:
    """Test suite for Hela.run()."""

    def test_runs_matching_task(self, program):
        calls = []

        def register(task):
            task.describe("Build it")
            task.option("--watch, -w", "Rebuild on change", False)
            task.option("--out-dir", "Output directory", "dist")
            task.action(lambda argv: calls.append(argv) or "built")

        program.define_task("build", register)
        program.define_task("lint", lambda task: task.action(lambda argv: "linted"))

        assert program.run(["build", "-w", "--out-dir", "out", "src"]) == "built"
        assert calls == [
            {"watch": True, "out_dir": "out", "cwd": os.getcwd(), "_": ["src"]}
        ]

    def test_boolean_option_can_be_turned_off(self, program):
        @program.task("build", options=[("--color", "Colour output", True)])
        def build(argv):
            return argv["color"]

        assert program.run(["build"]) is True
        assert program.run(["build", "--no-color"]) is False
        assert program.run(["build", "--color"]) is True

    def test_any_long_flag_sets_the_same_key(self, program):
        seen = []
        program.define_task(
            "build",
            lambda task: task.option("--fo, --foobar", "Output", "a").action(seen.append),
        )

        program.run(["build", "--foobar", "b"])

        assert seen[0]["fo"] == "b"
        assert "foobar" not in seen[0]

    def test_task_name_is_the_fallback_positional(self, program):
        seen = []
        program.define_task("build", lambda task: task.action(seen.append))

        program.run(["build", "--cwd", "/tmp"])

        assert seen == [{"cwd": "/tmp", "_": ["build"]}]

    def test_decorator_registration(self, program):
        @program.task("greet", options=[("--name", "Who", "world")])
        def greet(argv):
            """Say hello."""
            return f"hello {argv['name']}"

        assert program.tasks["greet"].description == "Say hello."
        assert program.run(["greet"]) == "hello world"
        assert program.run(["greet", "--name", "hela"]) == "hello hela"

    def test_async_handler(self, program):
        @program.task("echo")
        async def echo(argv):
            results = await program.exec("echo from-task", stdio="pipe")
            return results[0].stdout

        assert program.run(["echo"]) == "from-task"

    def test_default_task(self, program):
        program.define_task(None, lambda task: task.action(lambda argv: argv["_"]))

        assert DEFAULT_TASK in program.tasks
        assert program.run([]) == [DEFAULT_TASK]

    def test_no_match_is_a_no_op(self, program):
        calls = []
        program.define_task("build", lambda task: task.action(calls.append))

        assert program.run([]) is None
        assert calls == []

    def test_help_and_version_are_no_ops(self, program, capsys):
        program.define_task("build", lambda task: task.action(lambda argv: "x"))

        assert program.run(["--version"]) is None
        assert "1.2.3" in capsys.readouterr().out
        assert program.run(["--help"]) is None
        assert "build" in capsys.readouterr().out

    def test_unknown_task(self, program):
        program.define_task("build", lambda task: task.action(lambda argv: None))

        with pytest.raises(click.UsageError):
            program.run(["deploy"])

    def test_duplicate_task(self, program):
        program.define_task("build", lambda task: task.action(lambda argv: None))

        with pytest.raises(TaskDefinitionError):
            program.define_task("build", lambda task: task.action(lambda argv: None))


class TestErrorEnrichment:
    """Test suite for TaskExecutionError."""

    def test_handler_failure_is_enriched(self, program):
        def fail(argv):
            raise RuntimeError("boom")

        program.define_task("build", lambda task: task.action(fail))

        with pytest.raises(TaskExecutionError) as excinfo:
            program.run(["build"])

        error = excinfo.value
        assert error.command_name == "build"
        assert error.command_argv == {"cwd": os.getcwd(), "_": ["build"]}
        assert error.command_args == []
        assert isinstance(error.cause, RuntimeError)
        assert error.__cause__ is error.cause
        assert "boom" in error.message

    def test_positional_args_are_reported(self, program):
        def fail(argv):
            raise ValueError("bad input")

        program.define_task("build", lambda task: task.action(fail))

        with pytest.raises(TaskExecutionError) as excinfo:
            program.run(["build", "a", "b"])

        assert excinfo.value.command_args == ["a", "b"]
        assert excinfo.value.command_argv["_"] == ["a", "b"]

    def test_command_failure_inside_task(self, program):
        @program.task("check")
        async def check(argv):
            await program.shell(["exit 7"], stdio="pipe")

        with pytest.raises(TaskExecutionError) as excinfo:
            program.run(["check"])

        cause = excinfo.value.cause
        assert isinstance(cause, CommandExecutionError)
        assert cause.exit_code == 7

    @pytest.mark.asyncio
    async def test_async_handler_inside_running_loop(self, program):
        """An async task cannot be started from code already inside an event loop."""

        @program.task("check")
        async def check(argv):
            return "never"

        with pytest.raises(TaskExecutionError) as excinfo:
            program.run(["check"])

        assert isinstance(excinfo.value.cause, TaskDefinitionError)
        assert "running event loop" in str(excinfo.value)
