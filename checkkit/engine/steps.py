"""Check steps and their execution."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

from .recorder import DefaultStepRecorder, StepRecorder
from .runner import CommandRunner, CommandSpec


@dataclass(frozen=True)
class CheckStep:
    name: str
    commands: tuple[CommandSpec, ...]
    group: str | None = None
    env: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.name, str):
            raise TypeError(f"Step name must be a string (type={type(self.name).__name__})")
        name = self.name.strip()
        if not name:
            raise ValueError("Step name cannot be empty")
        object.__setattr__(self, "name", name)

        commands = tuple(self.commands)
        if not commands:
            raise ValueError(f"Step {name} has no commands")
        for command in commands:
            if not isinstance(command, CommandSpec):
                raise TypeError(
                    f"Step {name} command must be a CommandSpec (type={type(command).__name__})"
                )
        object.__setattr__(self, "commands", commands)
        object.__setattr__(self, "env", dict(self.env))

    def log_paths(self) -> tuple[str, ...]:
        return tuple(cmd.log_path for cmd in self.commands if cmd.log_path is not None)


@dataclass(frozen=True)
class StepOutcome:
    """Result of one step.

    `exit_code` is the first failing sub-command's code. `log_path` is the failing
    sub-command's log on failure, or the last log the step wrote on success.
    """

    name: str
    success: bool
    exit_code: int | None = None
    log_path: str | None = None
    commands_run: int = 0
    group: str | None = None


def execute_step(
    step: CheckStep,
    *,
    runner: CommandRunner,
    recorder: StepRecorder | None = None,
    index: int = 0,
    total: int = 1,
) -> StepOutcome:
    """Run the sub-commands of `step` in order, stopping at the first failure.

    Command failures never raise; they are returned as an unsuccessful outcome so the
    caller can move on to the next step.
    """

    recorder = recorder or DefaultStepRecorder()
    recorder.on_step_start(step, index=index, total=total)

    commands_run = 0
    outcome: StepOutcome | None = None
    for command in step.commands:
        result = runner.run(command, env=step.env)
        commands_run += 1
        recorder.on_command_end(step, command, result)
        if not result.succeeded:
            outcome = StepOutcome(
                name=step.name,
                success=False,
                exit_code=result.exit_code,
                log_path=command.log_path,
                commands_run=commands_run,
                group=step.group,
            )
            break

    if outcome is None:
        written_logs = step.log_paths()
        outcome = StepOutcome(
            name=step.name,
            success=True,
            log_path=written_logs[-1] if written_logs else None,
            commands_run=commands_run,
            group=step.group,
        )

    recorder.on_step_end(step, outcome)
    return outcome
