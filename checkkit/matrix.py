"""Check-matrix expansion: axes x step templates -> ordered concrete steps.

Templates use `str.format` placeholders naming axes, e.g. `"checking feature {feature}"`.
For each template the referenced axes are iterated in configured axis order, first
axis outermost, so the output order is fully determined by the configuration.
"""

from __future__ import annotations

import itertools
import os
import string
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field

from checkkit.engine.runner import CommandSpec
from checkkit.engine.steps import CheckStep
from checkkit.errors import ConfigurationError

_FORMATTER = string.Formatter()


@dataclass(frozen=True)
class Axis:
    name: str
    values: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise ConfigurationError("Axis name must be a non-empty string")
        name = self.name.strip()
        object.__setattr__(self, "name", name)

        values: list[str] = []
        seen: set[str] = set()
        duplicates: set[str] = set()
        for value in self.values:
            text = str(value).strip()
            if not text:
                raise ConfigurationError(f"Axis {name} contains an empty value")
            if text in seen:
                duplicates.add(text)
            seen.add(text)
            values.append(text)
        if duplicates:
            raise ConfigurationError(
                f"Axis {name} has duplicate value(s): {', '.join(sorted(duplicates))}"
            )
        object.__setattr__(self, "values", tuple(values))


def template_fields(text: str, *, where: str) -> tuple[str, ...]:
    """Axis names referenced by `text`, in order of first appearance."""

    try:
        parsed = list(_FORMATTER.parse(text))
    except ValueError as exc:
        raise ConfigurationError(f"Invalid placeholder syntax in {where}: {text!r} ({exc})") from exc

    names: list[str] = []
    for _literal, field_name, format_spec, conversion in parsed:
        if field_name is None:
            continue
        if not field_name or not field_name.isidentifier():
            raise ConfigurationError(
                f"Placeholders in {where} must name an axis (got {{{field_name}}} in {text!r})"
            )
        if format_spec or conversion:
            raise ConfigurationError(
                f"Placeholder {{{field_name}}} in {where} cannot use a format spec or conversion"
            )
        if field_name not in names:
            names.append(field_name)
    return tuple(names)


@dataclass(frozen=True)
class CommandTemplate:
    program: str
    args: tuple[str, ...] = ()
    cwd: str = "."
    log: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.program, str) or not self.program.strip():
            raise ConfigurationError("Command program must be a non-empty string")
        object.__setattr__(self, "program", self.program.strip())
        object.__setattr__(self, "args", tuple(str(arg) for arg in self.args))

    def texts(self) -> tuple[str, ...]:
        parts = [self.program, *self.args, self.cwd]
        if self.log is not None:
            parts.append(self.log)
        return tuple(parts)

    def render(self, values: Mapping[str, str], *, root: str | None) -> CommandSpec:
        cwd = _resolve_path(self.cwd.format(**values), root=root)
        log_path = None
        if self.log is not None:
            log_path = _resolve_path(self.log.format(**values), root=root)
        return CommandSpec(
            program=self.program.format(**values),
            args=tuple(arg.format(**values) for arg in self.args),
            cwd=cwd,
            log_path=log_path,
        )


@dataclass(frozen=True)
class StepTemplate:
    label: str
    commands: tuple[CommandTemplate, ...]
    group: str | None = None
    env: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.label, str) or not self.label.strip():
            raise ConfigurationError("Step template label must be a non-empty string")
        object.__setattr__(self, "label", self.label.strip())
        commands = tuple(self.commands)
        if not commands:
            raise ConfigurationError(f"Step template {self.label!r} has no commands")
        object.__setattr__(self, "commands", commands)
        object.__setattr__(self, "env", dict(self.env))

    def referenced_axes(self) -> tuple[str, ...]:
        where = f"step template {self.label!r}"
        names: list[str] = list(template_fields(self.label, where=where))
        for command in self.commands:
            for text in command.texts():
                for name in template_fields(text, where=where):
                    if name not in names:
                        names.append(name)
        return tuple(names)


def _resolve_path(path: str, *, root: str | None) -> str:
    expanded = os.path.expanduser(path)
    if root is not None and not os.path.isabs(expanded):
        expanded = os.path.join(root, expanded)
    return os.path.normpath(expanded)


def _index_axes(axes: Sequence[Axis]) -> dict[str, Axis]:
    by_name: dict[str, Axis] = {}
    for axis in axes:
        if axis.name in by_name:
            raise ConfigurationError(f"Duplicate axis name: {axis.name}")
        by_name[axis.name] = axis
    return by_name


def _expand_template(
    template: StepTemplate,
    axes: Sequence[Axis],
    by_name: Mapping[str, Axis],
    *,
    root: str | None,
) -> list[CheckStep]:
    referenced = set(template.referenced_axes())
    unknown = sorted(referenced - set(by_name))
    if unknown:
        available = ", ".join(by_name) or "<none>"
        raise ConfigurationError(
            f"Step template {template.label!r} references unknown axis: "
            f"{', '.join(unknown)} (available: {available})"
        )

    ordered = [axis for axis in axes if axis.name in referenced]
    empty = [axis.name for axis in ordered if not axis.values]
    if empty:
        raise ConfigurationError(
            f"Step template {template.label!r} references empty axis: {', '.join(empty)}"
        )

    steps: list[CheckStep] = []
    for combination in itertools.product(*(axis.values for axis in ordered)):
        values = {axis.name: value for axis, value in zip(ordered, combination, strict=True)}
        steps.append(
            CheckStep(
                name=template.label.format(**values),
                commands=tuple(cmd.render(values, root=root) for cmd in template.commands),
                group=template.group,
                env=template.env,
            )
        )
    return steps


def expand(
    axes: Sequence[Axis],
    templates: Iterable[StepTemplate],
    *,
    root: str | None = None,
) -> list[CheckStep]:
    """Expand `templates` over `axes` into concrete steps.

    Raises ConfigurationError for unknown or empty axes and for duplicate step names.
    Relative working directories and log paths are resolved against `root` when given.
    """

    axes = list(axes)
    by_name = _index_axes(axes)

    steps: list[CheckStep] = []
    for template in templates:
        steps.extend(_expand_template(template, axes, by_name, root=root))

    seen: set[str] = set()
    duplicates: list[str] = []
    for step in steps:
        if step.name in seen and step.name not in duplicates:
            duplicates.append(step.name)
        seen.add(step.name)
    if duplicates:
        raise ConfigurationError(f"Duplicate step name(s): {', '.join(duplicates)}")

    return steps
