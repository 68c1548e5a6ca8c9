from __future__ import annotations

import logging
import os
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TextIO

from checkkit.engine.recorder import DefaultStepRecorder
from checkkit.engine.runner import CommandRunner
from checkkit.engine.steps import CheckStep
from checkkit.errors import ConfigurationError
from checkkit.matrix import Axis, StepTemplate
from checkkit.orchestrator import Orchestrator
from checkkit.report import emit
from workspace_check.foundation.config_io import find_repo_root, load_config
from workspace_check.framework.config import CheckConfig
from workspace_check.framework.discovery import resolve_axes


@dataclass(frozen=True)
class CheckPlanInputs:
    root: str
    config: CheckConfig
    axes: tuple[Axis, ...]
    templates: tuple[StepTemplate, ...]


def resolve_root(root: str | os.PathLike[str] | None, *, logger: logging.Logger) -> str:
    if root is not None:
        resolved = os.path.abspath(os.fspath(root))
        if not os.path.isdir(resolved):
            raise ConfigurationError(f"Workspace root does not exist: {resolved}")
        return resolved
    try:
        return find_repo_root()
    except FileNotFoundError:
        cwd = os.getcwd()
        logger.debug("No workspace root marker found; using current directory %s", cwd)
        return cwd


def load_plan_inputs(
    *,
    groups: Sequence[str] | None,
    root: str | os.PathLike[str] | None = None,
    config_path: str | None = None,
    logger: logging.Logger,
) -> CheckPlanInputs:
    workspace_root = resolve_root(root, logger=logger)
    raw_cfg, meta = load_config(config_path=config_path, root=workspace_root)
    logger.debug("Loaded check config (mode=%s, paths=%s)", meta["mode"], meta["paths"])

    config = CheckConfig.from_dict(raw_cfg)
    selected = config.select(groups)
    logger.info("Workspace root: %s", workspace_root)
    logger.info("Selected check groups: %s", ", ".join(group.name for group in selected))

    templates = tuple(template for group in selected for template in group.steps)
    axes = tuple(resolve_axes(config.axes, root=workspace_root))
    return CheckPlanInputs(root=workspace_root, config=config, axes=axes, templates=templates)


def list_steps(steps: Sequence[CheckStep], *, stream: TextIO | None = None) -> None:
    lines = []
    for step in steps:
        lines.append(f"- {step.name}")
        for command in step.commands:
            suffix = f" > {command.log_path}" if command.log_path else ""
            lines.append(f"    {command.display()}{suffix}")
    emit("\n".join(lines) + "\n", stream)


def run_checks(
    *,
    groups: Sequence[str] | None = None,
    root: str | os.PathLike[str] | None = None,
    config_path: str | None = None,
    list_only: bool = False,
    logger: logging.Logger | None = None,
    runner: CommandRunner | None = None,
    stream: TextIO | None = None,
) -> int:
    """Run the selected check groups and return the process exit code.

    ConfigurationError and ReportingError propagate to the caller; step failures
    only show up in the report and the returned exit code.
    """

    logger = logger or logging.getLogger("workspace_check")
    inputs = load_plan_inputs(groups=groups, root=root, config_path=config_path, logger=logger)

    orchestrator = Orchestrator(
        runner=runner,
        recorder=DefaultStepRecorder(logger=logger, log_tail_lines=inputs.config.run.log_tail_lines),
        stream=stream,
        logger=logger,
    )
    steps = orchestrator.plan(inputs.axes, inputs.templates, root=inputs.root)
    if list_only:
        list_steps(steps, stream=stream)
        return 0

    result = orchestrator.execute(steps)
    if result.exit_code == 0:
        logger.info("All %s check step(s) passed", len(result.ledger))
    else:
        logger.warning(
            "%s of %s check step(s) failed: %s",
            len(result.ledger.failed()),
            len(result.ledger),
            ", ".join(result.ledger.failed()),
        )
    return result.exit_code
