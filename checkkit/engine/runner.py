"""Process-spawning primitive for check commands.

This is the only module in `checkkit` that touches the operating system. Everything
above it (steps, matrix, ledger, report) is platform-independent.
"""

from __future__ import annotations

import logging
import os
import subprocess
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)

# Shell conventions for "command not found" and "found but cannot execute".
NOT_FOUND_EXIT_CODE = 127
NOT_EXECUTABLE_EXIT_CODE = 126


@dataclass(frozen=True)
class CommandSpec:
    """One fully-resolved sub-command of a check step."""

    program: str
    args: tuple[str, ...] = ()
    cwd: str = "."
    log_path: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.program, str) or not self.program.strip():
            raise ValueError("CommandSpec.program must be a non-empty string")
        object.__setattr__(self, "program", self.program.strip())
        object.__setattr__(self, "args", tuple(str(arg) for arg in self.args))
        if self.log_path is not None and not str(self.log_path).strip():
            raise ValueError("CommandSpec.log_path cannot be empty")

    @property
    def argv(self) -> list[str]:
        return [self.program, *self.args]

    def display(self) -> str:
        return " ".join(self.argv)


@dataclass(frozen=True)
class CommandResult:
    exit_code: int
    launched: bool = True
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.launched and self.exit_code == 0


class CommandRunner(Protocol):
    def run(self, command: CommandSpec, *, env: Mapping[str, str] | None = None) -> CommandResult:
        ...


class SubprocessCommandRunner:
    """Blocking runner built on `subprocess.run`.

    The child inherits the parent environment plus `env` overrides. No timeout is
    applied; the call returns when the child exits. Launch problems (missing program,
    missing working directory) are reported as a synthetic `CommandResult` with
    `launched=False` instead of raising.
    """

    def __init__(self, *, base_env: Mapping[str, str] | None = None):
        self._base_env = base_env

    def _child_env(self, env: Mapping[str, str] | None) -> dict[str, str]:
        merged = dict(os.environ if self._base_env is None else self._base_env)
        if env:
            merged.update({str(k): str(v) for k, v in env.items()})
        return merged

    def run(self, command: CommandSpec, *, env: Mapping[str, str] | None = None) -> CommandResult:
        child_env = self._child_env(env)

        if not os.path.isdir(command.cwd):
            logger.error("Working directory does not exist: %s (%s)", command.cwd, command.display())
            return CommandResult(
                exit_code=NOT_FOUND_EXIT_CODE,
                launched=False,
                error=f"working directory not found: {command.cwd}",
            )

        log_handle = None
        if command.log_path is not None:
            log_file = Path(command.log_path)
            try:
                log_file.parent.mkdir(parents=True, exist_ok=True)
                log_handle = open(log_file, "w", encoding="utf-8")
            except OSError as exc:
                logger.error("Cannot open log file %s (%s)", log_file, exc)
                return CommandResult(
                    exit_code=NOT_EXECUTABLE_EXIT_CODE,
                    launched=False,
                    error=f"cannot open log file {log_file}: {exc}",
                )

        logger.debug("Running %s (cwd=%s)", command.display(), command.cwd)
        try:
            completed = subprocess.run(
                command.argv,
                cwd=command.cwd,
                env=child_env,
                stdout=log_handle,
                stderr=subprocess.STDOUT if log_handle is not None else None,
                check=False,
            )
        except FileNotFoundError as exc:
            logger.error("Program not found: %s (%s)", command.program, exc)
            return CommandResult(exit_code=NOT_FOUND_EXIT_CODE, launched=False, error=str(exc))
        except OSError as exc:
            logger.error("Program could not be executed: %s (%s)", command.program, exc)
            return CommandResult(exit_code=NOT_EXECUTABLE_EXIT_CODE, launched=False, error=str(exc))
        finally:
            if log_handle is not None:
                log_handle.close()

        return CommandResult(exit_code=int(completed.returncode))
