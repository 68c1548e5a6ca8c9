"""Reusable check-matrix kernel (runner, steps, expansion, ledger, report).

This package is independent of `workspace_check`. Which groups exist, where their
definitions come from and how the CLI selects them belong to the consuming application.
"""

from checkkit.config_namespace import ConfigNamespace
from checkkit.engine.recorder import DefaultStepRecorder, NullStepRecorder, StepRecorder
from checkkit.engine.runner import (
    CommandResult,
    CommandRunner,
    CommandSpec,
    SubprocessCommandRunner,
)
from checkkit.engine.steps import CheckStep, StepOutcome, execute_step
from checkkit.errors import ConfigurationError, ReportingError
from checkkit.ledger import Ledger
from checkkit.matrix import Axis, CommandTemplate, StepTemplate, expand
from checkkit.orchestrator import Orchestrator, RunResult, RunState, validate_steps
from checkkit.report import emit, render

__all__ = [
    "Axis",
    "CheckStep",
    "CommandResult",
    "CommandRunner",
    "CommandSpec",
    "CommandTemplate",
    "ConfigNamespace",
    "ConfigurationError",
    "DefaultStepRecorder",
    "Ledger",
    "NullStepRecorder",
    "Orchestrator",
    "ReportingError",
    "RunResult",
    "RunState",
    "StepOutcome",
    "StepRecorder",
    "StepTemplate",
    "SubprocessCommandRunner",
    "emit",
    "execute_step",
    "expand",
    "render",
    "validate_steps",
]
