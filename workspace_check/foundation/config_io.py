from __future__ import annotations

import os
from collections.abc import Mapping
from importlib import resources
from pathlib import Path
from typing import Any

import yaml

from checkkit.errors import ConfigurationError

CONFIG_ENV_VAR = "WORKSPACE_CHECK_CONFIG"
CONFIG_REL_DIR = "config"
CONFIG_FILE = "checks.yaml"
LOCAL_OVERLAY_FILE = "checks.local.yaml"
BUNDLED_CONFIG = "checks.yaml"


def find_repo_root(start: str | os.PathLike[str] | None = None) -> str:
    start_path = Path(start or os.getcwd()).resolve()
    if start_path.is_file():
        start_path = start_path.parent

    markers = (".git", f"{CONFIG_REL_DIR}/{CONFIG_FILE}")
    for candidate in (start_path, *start_path.parents):
        if (candidate / ".git").exists():
            return str(candidate)
        if (candidate / CONFIG_REL_DIR / CONFIG_FILE).is_file():
            return str(candidate)

    raise FileNotFoundError(
        "Cannot locate workspace root: searched from "
        f"{start_path} for {', '.join(markers)}"
    )


def _parse_yaml_mapping(text: str, *, source: str) -> dict[str, Any]:
    try:
        payload = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in {source}: {exc}") from exc

    if payload is None:
        payload = {}
    if not isinstance(payload, Mapping):
        raise ConfigurationError(f"Config file must contain a YAML mapping: {source}")
    return dict(payload)


def _load_yaml_mapping(path: str) -> dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as handle:
            text = handle.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigurationError(f"Cannot read config file {path}: {exc}") from exc
    return _parse_yaml_mapping(text, source=path)


def load_bundled_config() -> dict[str, Any]:
    """Check definitions shipped with the package (used when a workspace has none)."""

    text = resources.files("workspace_check.defaults").joinpath(BUNDLED_CONFIG).read_text(
        encoding="utf-8"
    )
    return _parse_yaml_mapping(text, source=f"<bundled {BUNDLED_CONFIG}>")


def _deep_merge(base: Any, overlay: Any, *, path: str) -> Any:
    if overlay is None:
        return None

    if base is None:
        return overlay

    if isinstance(base, Mapping):
        if not isinstance(overlay, Mapping):
            raise ConfigurationError(
                f"Invalid config overlay merge at {path}: base is mapping but overlay is {type(overlay).__name__}"
            )
        merged: dict[str, Any] = dict(base)
        for key, overlay_value in overlay.items():
            next_path = f"{path}.{key}" if path else str(key)
            if key in base:
                merged[key] = _deep_merge(base[key], overlay_value, path=next_path)
            else:
                merged[key] = overlay_value
        return merged

    # Lists (axis values, step lists, argv) are replaced wholesale.
    if isinstance(base, (list, tuple)):
        if not isinstance(overlay, (list, tuple)):
            raise ConfigurationError(
                f"Invalid config overlay merge at {path}: base is list but overlay is {type(overlay).__name__}"
            )
        return list(overlay)

    if isinstance(overlay, (Mapping, list, tuple)):
        raise ConfigurationError(
            f"Invalid config overlay merge at {path}: base is {type(base).__name__} but overlay is {type(overlay).__name__}"
        )

    return overlay


def load_config(
    *,
    config_path: str | os.PathLike[str] | None = None,
    env_var: str | None = CONFIG_ENV_VAR,
    root: str | os.PathLike[str] | None = None,
) -> tuple[dict[str, Any], dict[str, Any]]:
    """Load check definitions and return `(cfg, meta)`.

    Resolution order:
      1. `config_path`, or the file named by `env_var` (single file, no overlay)
      2. `<root>/config/checks.yaml` plus optional `<root>/config/checks.local.yaml`
      3. the bundled defaults, with the local overlay applied if present
    """

    explicit_path = None
    if config_path is not None:
        explicit_path = str(config_path).strip() or None
    elif env_var:
        explicit_path = os.environ.get(env_var, "").strip() or None

    if explicit_path:
        expanded = os.path.abspath(os.path.expandvars(os.path.expanduser(explicit_path)))
        if not os.path.isfile(expanded):
            raise ConfigurationError(f"Config file not found: {expanded}")
        cfg = _load_yaml_mapping(expanded)
        meta = {
            "mode": "env" if config_path is None else "explicit",
            "paths": [expanded],
            "env_var": env_var,
        }
        return cfg, meta

    config_directory = os.path.join(str(root or os.getcwd()), CONFIG_REL_DIR)
    base_config_path = os.path.join(config_directory, CONFIG_FILE)
    local_overlay_path = os.path.join(config_directory, LOCAL_OVERLAY_FILE)

    if os.path.isfile(base_config_path):
        cfg = _load_yaml_mapping(base_config_path)
        loaded_paths = [os.path.abspath(base_config_path)]
        mode = "base"
    else:
        cfg = load_bundled_config()
        loaded_paths = []
        mode = "bundled"

    if os.path.isfile(local_overlay_path):
        overlay = _load_yaml_mapping(local_overlay_path)
        cfg = _deep_merge(cfg, overlay, path="")
        loaded_paths.append(os.path.abspath(local_overlay_path))
        mode = f"{mode}+local"

    meta = {"mode": mode, "paths": loaded_paths, "env_var": env_var}
    return cfg, meta
