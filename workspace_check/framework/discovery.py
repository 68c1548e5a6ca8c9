from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from pathlib import Path

from checkkit.matrix import Axis

from .config import AxisConfig

logger = logging.getLogger(__name__)


def discover_values(root: str | Path, pattern: str, *, exclude: Iterable[str] = ()) -> list[str]:
    """Directories under `root` matching `pattern`, as sorted root-relative POSIX paths.

    A match is dropped when any of its path components is listed in `exclude`
    (e.g. a shared `target` build directory living next to the projects).
    """

    root_path = Path(root)
    excluded = {item.strip() for item in exclude if item.strip()}
    values: list[str] = []
    for match in root_path.glob(pattern):
        if not match.is_dir():
            continue
        relative = match.relative_to(root_path)
        if excluded.intersection(relative.parts):
            continue
        values.append(relative.as_posix())
    return sorted(values)


def resolve_axes(axes: Sequence[AxisConfig], *, root: str | Path) -> list[Axis]:
    resolved: list[Axis] = []
    for axis in axes:
        if axis.values is not None:
            resolved.append(Axis(name=axis.name, values=axis.values))
            continue
        values = discover_values(root, axis.discover or "", exclude=axis.exclude)
        logger.debug("Discovered %s value(s) for axis %s: %s", len(values), axis.name, values)
        resolved.append(Axis(name=axis.name, values=tuple(values)))
    return resolved
