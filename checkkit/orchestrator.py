"""Sequential check run: expand -> execute every step -> report.

Run states: not_started -> expanding -> executing -> reporting -> done.
Once execution starts, reporting is always reached regardless of step failures;
only ConfigurationError (before execution) and ReportingError stop a run early.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Literal, TextIO, TypeAlias

from checkkit.engine.recorder import DefaultStepRecorder, StepRecorder
from checkkit.engine.runner import CommandRunner, SubprocessCommandRunner
from checkkit.engine.steps import CheckStep, execute_step
from checkkit.errors import ConfigurationError
from checkkit.ledger import Ledger
from checkkit.matrix import Axis, StepTemplate, expand
from checkkit.report import emit, render

RunState: TypeAlias = Literal["not_started", "expanding", "executing", "reporting", "done"]


@dataclass(frozen=True)
class RunResult:
    ledger: Ledger
    text: str
    exit_code: int


def validate_steps(steps: Sequence[CheckStep]) -> None:
    """Preflight checks that must pass before any command is launched."""

    if not steps:
        raise ConfigurationError("Check matrix expanded to zero steps")

    seen: set[str] = set()
    for step in steps:
        if step.name in seen:
            raise ConfigurationError(f"Duplicate step name: {step.name}")
        seen.add(step.name)
        for command in step.commands:
            if not os.path.isdir(command.cwd):
                raise ConfigurationError(
                    f"Working directory for step {step.name!r} does not exist: {command.cwd}"
                )
            if command.log_path is not None and os.path.isdir(command.log_path):
                raise ConfigurationError(
                    f"Log file for step {step.name!r} is an existing directory: {command.log_path}"
                )


class Orchestrator:
    def __init__(
        self,
        *,
        runner: CommandRunner | None = None,
        recorder: StepRecorder | None = None,
        stream: TextIO | None = None,
        logger: logging.Logger | None = None,
    ):
        self._logger = logger or logging.getLogger(__name__)
        self._runner = runner or SubprocessCommandRunner()
        self._recorder = recorder or DefaultStepRecorder(logger=self._logger)
        self._validate_recorder(self._recorder)
        self._stream = stream
        self.state: RunState = "not_started"
        self.current_index: int | None = None

    def _validate_recorder(self, recorder: StepRecorder) -> None:
        for name in ("on_step_start", "on_command_end", "on_step_end"):
            method = getattr(recorder, name, None)
            if method is None or not callable(method):
                raise TypeError(f"Step recorder missing required method: {name}")

    def _transition(self, state: RunState) -> None:
        self._logger.debug("Run state: %s -> %s", self.state, state)
        self.state = state

    def plan(
        self,
        axes: Sequence[Axis],
        templates: Iterable[StepTemplate],
        *,
        root: str | None = None,
    ) -> list[CheckStep]:
        self._transition("expanding")
        steps = expand(axes, templates, root=root)
        validate_steps(steps)
        self._logger.debug("Expanded %s step(s)", len(steps))
        return steps

    def run(
        self,
        axes: Sequence[Axis],
        templates: Iterable[StepTemplate],
        *,
        root: str | None = None,
    ) -> RunResult:
        return self.execute(self.plan(axes, templates, root=root))

    def execute(self, steps: Sequence[CheckStep]) -> RunResult:
        steps = list(steps)
        validate_steps(steps)

        log_paths: list[str] = []
        for step in steps:
            for path in step.log_paths():
                if path not in log_paths:
                    log_paths.append(path)

        try:
            ledger = Ledger()
            self._transition("executing")
            total = len(steps)
            for index, step in enumerate(steps):
                self.current_index = index
                outcome = execute_step(
                    step,
                    runner=self._runner,
                    recorder=self._recorder,
                    index=index,
                    total=total,
                )
                ledger.record(outcome)
            self.current_index = None

            self._transition("reporting")
            text, exit_code = render(ledger)
            emit(text, self._stream)
            self._transition("done")
            return RunResult(ledger=ledger, text=text, exit_code=exit_code)
        finally:
            self._remove_logs(log_paths)

    def _remove_logs(self, paths: Iterable[str]) -> None:
        for path in paths:
            if not os.path.exists(path):
                continue
            try:
                os.remove(path)
            except OSError:
                self._logger.exception("Failed to remove transient log file %s", path)
                continue
            self._logger.debug("Removed transient log file %s", path)
