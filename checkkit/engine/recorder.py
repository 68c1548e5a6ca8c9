from __future__ import annotations

import logging
from collections import deque
from typing import TYPE_CHECKING, Protocol

from .runner import CommandResult, CommandSpec

if TYPE_CHECKING:
    from .steps import CheckStep, StepOutcome


class StepRecorder(Protocol):
    def on_step_start(self, step: "CheckStep", *, index: int, total: int) -> None:
        ...

    def on_command_end(self, step: "CheckStep", command: CommandSpec, result: CommandResult) -> None:
        ...

    def on_step_end(self, step: "CheckStep", outcome: "StepOutcome") -> None:
        ...


def read_log_tail(path: str, *, lines: int) -> list[str]:
    if lines <= 0:
        return []
    try:
        with open(path, "r", encoding="utf-8", errors="replace") as handle:
            return [line.rstrip("\n") for line in deque(handle, maxlen=lines)]
    except OSError:
        return []


class DefaultStepRecorder:
    def __init__(self, *, logger: logging.Logger | None = None, log_tail_lines: int = 20):
        self._logger = logger or logging.getLogger("checkkit")
        self._log_tail_lines = int(log_tail_lines)

    def on_step_start(self, step: "CheckStep", *, index: int, total: int) -> None:
        tokens: list[str] = [f"step={index + 1}/{total}", f"commands={len(step.commands)}"]
        if step.group:
            tokens.append(f"group={step.group}")
        self._logger.info("%s ... (%s)", step.name, ", ".join(tokens))

    def on_command_end(self, step: "CheckStep", command: CommandSpec, result: CommandResult) -> None:
        if not result.launched:
            self._logger.error(
                "Could not launch %s for %s: %s", command.display(), step.name, result.error
            )
            return
        if result.succeeded:
            self._logger.debug("Command ok: %s", command.display())
        else:
            self._logger.warning("Command failed (exit=%s): %s", result.exit_code, command.display())

    def on_step_end(self, step: "CheckStep", outcome: "StepOutcome") -> None:
        if outcome.success:
            self._logger.info("%s is ok.", step.name)
            return

        self._logger.warning(
            "%s failed (exit=%s, commands_run=%s/%s)",
            step.name,
            outcome.exit_code,
            outcome.commands_run,
            len(step.commands),
        )
        if outcome.log_path:
            tail = read_log_tail(outcome.log_path, lines=self._log_tail_lines)
            if tail:
                self._logger.warning(
                    "Last %s line(s) of %s:\n%s", len(tail), outcome.log_path, "\n".join(tail)
                )


class NullStepRecorder:
    def on_step_start(self, step: "CheckStep", *, index: int, total: int) -> None:
        return

    def on_command_end(self, step: "CheckStep", command: CommandSpec, result: CommandResult) -> None:
        return

    def on_step_end(self, step: "CheckStep", outcome: "StepOutcome") -> None:
        return
