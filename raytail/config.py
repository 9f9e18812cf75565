from __future__ import annotations

import json
import os
import warnings
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

DEFAULT_CONFIG_PATH = Path("~/.config/raytail/config.json")
ENV_PREFIX = "RAYTAIL_"

_TRUE_WORDS = frozenset({"1", "true", "yes", "on"})
_FALSE_WORDS = frozenset({"0", "false", "no", "off"})


@dataclass
class RaytailConfig:
    host: str = "127.0.0.1"
    port: int = 23517
    max_payloads: int = 1000
    preview_length: int = 50
    stream: bool = False
    log_level: str = "WARNING"
    log_file: str | None = None


# Annotations are strings here ("int", "bool", "str | None").
_FIELD_TYPES = {f.name: f.type for f in fields(RaytailConfig)}


def env_var_for(key: str) -> str:
    return f"{ENV_PREFIX}{key.upper()}"


def get_config_path(path: Path | None = None) -> Path:
    if path is None:
        path = Path(os.environ.get("RAYTAIL_CONFIG") or DEFAULT_CONFIG_PATH)
    return path.expanduser()


def read_config_file(path: Path | None = None) -> dict[str, Any]:
    """Return the config file as a dict; a missing or blank file is ``{}``."""

    config_path = get_config_path(path)
    try:
        raw = config_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return {}
    if not raw.strip():
        return {}
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValueError("invalid config json") from exc
    if not isinstance(data, dict):
        raise ValueError("config must be an object")
    return data


def get_env_overrides() -> dict[str, str]:
    return {
        key: os.environ[env_var_for(key)]
        for key in _FIELD_TYPES
        if env_var_for(key) in os.environ
    }


def _coerce(key: str, value: Any, default: Any) -> Any:
    kind = _FIELD_TYPES[key]
    if kind == "bool":
        if isinstance(value, bool):
            return value
        word = str(value).strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
    elif kind == "int":
        if not isinstance(value, bool):
            try:
                return int(value)
            except (TypeError, ValueError, OverflowError):
                pass
    else:
        return None if value is None else str(value)
    warnings.warn(f"Invalid {kind} for {key}: {value!r}", RuntimeWarning, stacklevel=3)
    return default


def load_config(path: Path | None = None) -> RaytailConfig:
    """Build the effective config: defaults, then the config file, then env."""

    try:
        data = read_config_file(path)
    except (OSError, ValueError) as exc:
        warnings.warn(
            f"Ignoring config file {get_config_path(path)}: {exc}", RuntimeWarning, stacklevel=2
        )
        data = {}
    cfg = RaytailConfig()
    for key, value in {**data, **get_env_overrides()}.items():
        if key in _FIELD_TYPES:
            setattr(cfg, key, _coerce(key, value, getattr(cfg, key)))
    return cfg
