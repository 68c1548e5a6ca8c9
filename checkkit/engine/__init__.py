"""Engine primitives for running check steps."""

from checkkit.engine.recorder import DefaultStepRecorder, NullStepRecorder, StepRecorder
from checkkit.engine.runner import (
    NOT_EXECUTABLE_EXIT_CODE,
    NOT_FOUND_EXIT_CODE,
    CommandResult,
    CommandRunner,
    CommandSpec,
    SubprocessCommandRunner,
)
from checkkit.engine.steps import CheckStep, StepOutcome, execute_step

__all__ = [
    "NOT_EXECUTABLE_EXIT_CODE",
    "NOT_FOUND_EXIT_CODE",
    "CheckStep",
    "CommandResult",
    "CommandRunner",
    "CommandSpec",
    "DefaultStepRecorder",
    "NullStepRecorder",
    "StepOutcome",
    "StepRecorder",
    "SubprocessCommandRunner",
    "execute_step",
]
