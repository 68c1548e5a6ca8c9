"""Strict, path-aware config parsing for check definitions."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from checkkit.errors import ConfigurationError

_MISSING = object()


def _join_path(parent: str, key: str) -> str:
    if not parent:
        return key
    return f"{parent}.{key}"


@dataclass
class ConfigNamespace:
    """Mapping wrapper that tracks which keys were read so typos fail loudly."""

    data: Mapping[str, Any]
    path: str
    _consumed: set[str] = field(default_factory=set, init=False, repr=False)
    _children: dict[str, "ConfigNamespace"] = field(default_factory=dict, init=False, repr=False)

    def keys(self) -> tuple[str, ...]:
        """Keys in configured order (YAML mappings keep document order)."""

        return tuple(str(key) for key in self.data.keys())

    def consumed_keys(self) -> tuple[str, ...]:
        return tuple(sorted(self._consumed))

    def unconsumed_keys(self) -> tuple[str, ...]:
        return tuple(sorted(str(k) for k in self.data.keys() if k not in self._consumed))

    def assert_consumed(self) -> None:
        unknown = list(self.unconsumed_keys())
        if unknown:
            path = self.path or "<root>"
            consumed = ", ".join(self.consumed_keys()) or "<none>"
            raise ConfigurationError(
                f"Unknown config keys under {path}: {', '.join(unknown)} (consumed: {consumed})"
            )
        for child in self._children.values():
            child.assert_consumed()

    def _key(self, key: str) -> str:
        if not isinstance(key, str) or not key.strip():
            raise TypeError("ConfigNamespace key must be a non-empty string")
        return key.strip()

    def _get_raw(self, key: str, *, default: Any) -> Any:
        normalized = self._key(key)
        if normalized in self._children:
            raise ConfigurationError(
                f"{_join_path(self.path, normalized)} already accessed as a nested namespace"
            )
        self._consumed.add(normalized)
        if normalized not in self.data:
            if default is _MISSING:
                raise ConfigurationError(
                    f"Missing required config key: {_join_path(self.path, normalized)}"
                )
            return default
        return self.data.get(normalized)

    def namespace(self, key: str, *, default: Mapping[str, Any] | None | object = _MISSING) -> "ConfigNamespace":
        normalized = self._key(key)
        if normalized in self._children:
            return self._children[normalized]

        child_path = _join_path(self.path, normalized)
        raw = self.data.get(normalized)
        self._consumed.add(normalized)
        if raw is None:
            if default is _MISSING:
                raise ConfigurationError(f"Missing required config namespace: {child_path}")
            raw = default if default is not None else {}
        if not isinstance(raw, Mapping):
            raise ConfigurationError(f"{child_path} must be a mapping (type={type(raw).__name__})")

        child = ConfigNamespace(dict(raw), path=child_path)
        self._children[normalized] = child
        return child

    def get_int(
        self,
        key: str,
        *,
        default: int | object = _MISSING,
        min_value: int | None = None,
    ) -> int:
        value = self._get_raw(key, default=default)
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigurationError(
                f"{_join_path(self.path, key.strip())} must be an int (type={type(value).__name__})"
            )
        if min_value is not None and value < min_value:
            raise ConfigurationError(
                f"{_join_path(self.path, key.strip())} must be >= {min_value} (got {value})"
            )
        return value

    def get_str(
        self,
        key: str,
        *,
        default: str | None | object = _MISSING,
        allow_empty: bool = False,
    ) -> str | None:
        raw = self._get_raw(key, default=default)
        if raw is None:
            return None
        if not isinstance(raw, str):
            raise ConfigurationError(
                f"{_join_path(self.path, key.strip())} must be a string (type={type(raw).__name__})"
            )
        value = raw.strip()
        if not value and not allow_empty:
            raise ConfigurationError(f"{_join_path(self.path, key.strip())} cannot be empty")
        return value

    def get_list_str(
        self,
        key: str,
        *,
        default: list[str] | tuple[str, ...] | object = _MISSING,
        allow_empty: bool = False,
    ) -> list[str]:
        raw = self._get_raw(key, default=default)
        path = _join_path(self.path, key.strip())
        if not isinstance(raw, (list, tuple)):
            raise ConfigurationError(f"{path} must be a list[str] (type={type(raw).__name__})")

        items: list[str] = []
        for idx, item in enumerate(raw):
            # YAML turns bare numbers into ints; command arguments are always text.
            if isinstance(item, bool) or not isinstance(item, (str, int)):
                raise ConfigurationError(
                    f"{path}[{idx}] must be a string (type={type(item).__name__})"
                )
            text = str(item).strip()
            if not text:
                raise ConfigurationError(f"{path}[{idx}] cannot be empty")
            items.append(text)

        if not items and not allow_empty:
            raise ConfigurationError(f"{path} cannot be empty")
        return items

    def get_list(self, key: str, *, default: list[Any] | object = _MISSING, allow_empty: bool = False) -> list[Any]:
        raw = self._get_raw(key, default=default)
        path = _join_path(self.path, key.strip())
        if not isinstance(raw, (list, tuple)):
            raise ConfigurationError(f"{path} must be a list (type={type(raw).__name__})")
        if not raw and not allow_empty:
            raise ConfigurationError(f"{path} cannot be empty")
        return list(raw)

    def get_str_mapping(self, key: str, *, default: Mapping[str, str] | object = _MISSING) -> dict[str, str]:
        raw = self._get_raw(key, default=default)
        path = _join_path(self.path, key.strip())
        if raw is None:
            return {}
        if not isinstance(raw, Mapping):
            raise ConfigurationError(f"{path} must be a mapping (type={type(raw).__name__})")

        out: dict[str, str] = {}
        for name, value in raw.items():
            if not isinstance(name, str) or not name.strip():
                raise ConfigurationError(f"{path} keys must be non-empty strings (got {name!r})")
            if isinstance(value, bool) or not isinstance(value, (str, int, float)):
                raise ConfigurationError(
                    f"{_join_path(path, name)} must be a scalar (type={type(value).__name__})"
                )
            out[name.strip()] = str(value)
        return out
