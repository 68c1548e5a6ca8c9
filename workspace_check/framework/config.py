from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from checkkit.config_namespace import ConfigNamespace
from checkkit.errors import ConfigurationError
from checkkit.matrix import CommandTemplate, StepTemplate


@dataclass(frozen=True)
class RunSettings:
    default_groups: tuple[str, ...]
    log_tail_lines: int = 20


@dataclass(frozen=True)
class AxisConfig:
    """Either a static value list or a glob discovered relative to the workspace root."""

    name: str
    values: tuple[str, ...] | None = None
    discover: str | None = None
    exclude: tuple[str, ...] = ()


@dataclass(frozen=True)
class GroupConfig:
    name: str
    steps: tuple[StepTemplate, ...]
    description: str | None = None
    env: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class CheckConfig:
    run: RunSettings
    axes: tuple[AxisConfig, ...]
    groups: Mapping[str, GroupConfig]

    def group(self, name: str) -> GroupConfig:
        key = (name or "").strip()
        found = self.groups.get(key)
        if found is None:
            available = ", ".join(self.groups) or "<none>"
            raise ConfigurationError(f"Unknown check group: {name} (available: {available})")
        return found

    def select(self, names: Iterable[str] | None) -> list[GroupConfig]:
        """Resolve group names (None -> `run.default_groups`), dropping repeats."""

        requested = list(self.run.default_groups if names is None else names)
        if not requested:
            raise ConfigurationError("No check groups selected")
        selected: list[GroupConfig] = []
        for name in requested:
            group = self.group(name)
            if group not in selected:
                selected.append(group)
        return selected

    @classmethod
    def from_dict(cls, cfg: Mapping[str, Any]) -> "CheckConfig":
        root = ConfigNamespace(cfg, path="")

        groups_ns = root.namespace("groups")
        groups: dict[str, GroupConfig] = {}
        for name in groups_ns.keys():
            groups[name] = _parse_group(name, groups_ns.namespace(name))
        if not groups:
            raise ConfigurationError("groups cannot be empty")

        axes_ns = root.namespace("axes", default=None)
        axes = tuple(_parse_axis(name, axes_ns.namespace(name)) for name in axes_ns.keys())

        run_ns = root.namespace("run", default=None)
        default_groups = tuple(run_ns.get_list_str("default_groups", default=list(groups)))
        log_tail_lines = run_ns.get_int("log_tail_lines", default=20, min_value=0)

        root.assert_consumed()

        unknown = [name for name in default_groups if name not in groups]
        if unknown:
            raise ConfigurationError(
                f"run.default_groups references unknown group(s): {', '.join(unknown)}"
            )

        return cls(
            run=RunSettings(default_groups=default_groups, log_tail_lines=log_tail_lines),
            axes=axes,
            groups=groups,
        )


def _parse_axis(name: str, ns: ConfigNamespace) -> AxisConfig:
    values = ns.get_list_str("values", allow_empty=True) if "values" in ns.data else None
    discover = ns.get_str("discover", default=None)
    exclude = tuple(ns.get_list_str("exclude", default=[], allow_empty=True))

    if (values is None) == (discover is None):
        raise ConfigurationError(f"axes.{name} must set exactly one of: values, discover")
    if exclude and discover is None:
        raise ConfigurationError(f"axes.{name}.exclude only applies to discovered axes")

    return AxisConfig(
        name=name,
        values=tuple(values) if values is not None else None,
        discover=discover,
        exclude=exclude,
    )


def _parse_command(raw: Any, *, path: str) -> CommandTemplate:
    if isinstance(raw, (list, tuple)):
        argv = ConfigNamespace({"argv": raw}, path=path).get_list_str("argv")
        return CommandTemplate(program=argv[0], args=tuple(argv[1:]))

    if not isinstance(raw, Mapping):
        raise ConfigurationError(
            f"{path} must be an argv list or a mapping (type={type(raw).__name__})"
        )

    ns = ConfigNamespace(dict(raw), path=path)
    program = ns.get_str("program")
    args = ns.get_list_str("args", default=[], allow_empty=True)
    cwd = ns.get_str("cwd", default=".")
    log = ns.get_str("log", default=None)
    ns.assert_consumed()
    return CommandTemplate(program=program, args=tuple(args), cwd=cwd, log=log)


def _parse_group(name: str, ns: ConfigNamespace) -> GroupConfig:
    description = ns.get_str("description", default=None)
    env = ns.get_str_mapping("env", default={})

    steps: list[StepTemplate] = []
    for idx, raw_step in enumerate(ns.get_list("steps")):
        step_path = f"{ns.path}.steps[{idx}]"
        if not isinstance(raw_step, Mapping):
            raise ConfigurationError(
                f"{step_path} must be a mapping (type={type(raw_step).__name__})"
            )
        step_ns = ConfigNamespace(dict(raw_step), path=step_path)
        label = step_ns.get_str("label")
        commands = tuple(
            _parse_command(raw_command, path=f"{step_path}.commands[{cmd_idx}]")
            for cmd_idx, raw_command in enumerate(step_ns.get_list("commands"))
        )
        step_ns.assert_consumed()
        steps.append(StepTemplate(label=label, commands=commands, group=name, env=env))

    return GroupConfig(name=name, steps=tuple(steps), description=description, env=env)
