import logging

import pytest

from checkkit.engine.recorder import DefaultStepRecorder, NullStepRecorder
from checkkit.engine.runner import CommandResult, CommandSpec
from checkkit.engine.steps import CheckStep, StepOutcome, execute_step


class FakeRunner:
    def __init__(self, exit_codes: dict[str, int] | None = None):
        self.exit_codes = exit_codes or {}
        self.calls: list[tuple[str, dict]] = []

    def run(self, command, *, env=None):
        self.calls.append((command.display(), dict(env or {})))
        code = self.exit_codes.get(command.display(), 0)
        return CommandResult(exit_code=code)


def _step(name: str, *programs: str, **kwargs) -> CheckStep:
    return CheckStep(name=name, commands=tuple(CommandSpec(program=p) for p in programs), **kwargs)


def test_all_commands_succeed():
    runner = FakeRunner()
    outcome = execute_step(_step("unit test", "a", "b", "c"), runner=runner, recorder=NullStepRecorder())

    assert outcome == StepOutcome(name="unit test", success=True, commands_run=3)
    assert [call for call, _env in runner.calls] == ["a", "b", "c"]


def test_first_failure_short_circuits_remaining_commands():
    runner = FakeRunner({"b": 101})
    outcome = execute_step(_step("feature contract", "a", "b", "c", "d"), runner=runner, recorder=NullStepRecorder())

    assert outcome.success is False
    assert outcome.exit_code == 101
    assert outcome.commands_run == 2
    assert [call for call, _env in runner.calls] == ["a", "b"]


def test_failing_command_log_path_is_reported():
    runner = FakeRunner({"build": 1})
    step = CheckStep(
        name="feature contract",
        commands=(CommandSpec(program="check"), CommandSpec(program="build", log_path="/tmp/build.log")),
    )

    outcome = execute_step(step, runner=runner, recorder=NullStepRecorder())

    assert outcome.log_path == "/tmp/build.log"


def test_step_env_is_passed_to_every_command():
    runner = FakeRunner()
    step = _step("examples", "a", "b", env={"CARGO_TARGET_DIR": "./examples/target"})

    execute_step(step, runner=runner, recorder=NullStepRecorder())

    assert [env for _call, env in runner.calls] == [{"CARGO_TARGET_DIR": "./examples/target"}] * 2


def test_launch_failure_is_recorded_not_raised():
    class MissingProgramRunner:
        def run(self, command, *, env=None):
            return CommandResult(exit_code=127, launched=False, error="not found")

    outcome = execute_step(_step("fmt", "cargo"), runner=MissingProgramRunner(), recorder=NullStepRecorder())

    assert outcome.success is False
    assert outcome.exit_code == 127


def test_recorder_hooks_are_called_in_order():
    events: list[str] = []

    class ListRecorder:
        def on_step_start(self, step, *, index, total):
            events.append(f"start {step.name} {index}/{total}")

        def on_command_end(self, step, command, result):
            events.append(f"cmd {command.program} {result.exit_code}")

        def on_step_end(self, step, outcome):
            events.append(f"end {outcome.success}")

    execute_step(_step("s", "a", "b"), runner=FakeRunner({"a": 2}), recorder=ListRecorder(), index=1, total=4)

    assert events == ["start s 1/4", "cmd a 2", "end False"]


def test_default_recorder_logs_step_lifecycle(caplog):
    recorder = DefaultStepRecorder(logger=logging.getLogger("tests.recorder"))
    with caplog.at_level("INFO", logger="tests.recorder"):
        execute_step(_step("checking feature contract", "a"), runner=FakeRunner(), recorder=recorder)

    assert "checking feature contract ..." in caplog.text
    assert "checking feature contract is ok." in caplog.text


def test_check_step_requires_name_and_commands():
    with pytest.raises(ValueError, match=r"Step name cannot be empty"):
        _step("  ", "a")
    with pytest.raises(ValueError, match=r"has no commands"):
        CheckStep(name="empty", commands=())


def test_successful_step_reports_last_log_written():
    step = CheckStep(
        name="feature contract",
        commands=(
            CommandSpec(program="check", log_path="/tmp/check.log"),
            CommandSpec(program="build", log_path="/tmp/build.log"),
            CommandSpec(program="fmt"),
        ),
    )

    outcome = execute_step(step, runner=FakeRunner(), recorder=NullStepRecorder())

    assert outcome.success is True
    assert outcome.log_path == "/tmp/build.log"


def test_unreadable_log_does_not_break_failure_logging(tmp_path, caplog):
    logger = logging.getLogger("tests.recorder")
    step = CheckStep(name="build", commands=(CommandSpec(program="build", log_path=str(tmp_path)),))

    with caplog.at_level("INFO", logger="tests.recorder"):
        outcome = execute_step(
            step,
            runner=FakeRunner({"build": 126}),
            recorder=DefaultStepRecorder(logger=logger),
        )

    assert outcome.success is False
    assert "build failed (exit=126" in caplog.text
    assert "Last" not in caplog.text
