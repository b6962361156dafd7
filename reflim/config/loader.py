"""Configuration loading with precedence: defaults < file < environment < CLI."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional

from reflim.exceptions import ConfigValidationError
from reflim.utils.logging import get_logger

log = get_logger(__name__, component="config")

Caster = Callable[[Any], Any]


def _load_yaml(path: Path) -> dict:
    try:
        import yaml  # type: ignore
    except ImportError as exc:  # pragma: no cover - optional dependency
        raise ConfigValidationError("pyyaml is required to load YAML config files") from exc
    content = yaml.safe_load(path.read_text())
    return content or {}


def load_config_file(path: Path) -> dict:
    if not path.exists():
        raise ConfigValidationError(f"Config file not found: {path}")
    suffix = path.suffix.lower()
    if suffix == ".json":
        content = json.loads(path.read_text())
    elif suffix in {".yml", ".yaml"}:
        content = _load_yaml(path)
    else:
        raise ConfigValidationError("Config file must be JSON or YAML")
    if not isinstance(content, dict):
        raise ConfigValidationError(f"Config file {path} must contain a mapping")
    return content


def _cast(key: str, value: Any, casters: Mapping[str, Caster]) -> Any:
    if value is None or key not in casters:
        return value
    try:
        return casters[key](value)
    except (TypeError, ValueError) as exc:
        raise ConfigValidationError(f"Invalid value for {key}: {value!r}") from exc


def load_config_with_precedence(
    config_path: Optional[Path],
    env_prefix: str,
    cli_values: Mapping[str, Any],
    defaults: Mapping[str, Any],
    casters: Optional[Mapping[str, Caster]] = None,
) -> Dict[str, Any]:
    """Merge configuration sources for the keys named in ``defaults``.

    Config files may only name keys present in ``defaults``. CLI values that
    are None do not override lower-precedence sources.
    Environment variables are read as ``{env_prefix}{KEY.upper()}``.
    """
    casters = casters or {}
    merged: Dict[str, Any] = dict(defaults)
    sources: Dict[str, str] = {key: "default" for key in defaults}

    if config_path is not None:
        file_values = load_config_file(Path(config_path))
        unknown = sorted(set(file_values) - set(defaults))
        if unknown:
            raise ConfigValidationError(f"Unknown configuration keys in {config_path}: {unknown}")
        for key, value in file_values.items():
            merged[key] = value
            sources[key] = "file"

    for key in defaults:
        env_value = os.environ.get(f"{env_prefix}{key.upper()}")
        if env_value is not None:
            merged[key] = env_value
            sources[key] = "env"

    for key, value in cli_values.items():
        if key in defaults and value is not None:
            merged[key] = value
            sources[key] = "cli"

    resolved = {key: _cast(key, value, casters) for key, value in merged.items()}
    log.debug("Resolved configuration", extra={"sources": sources})
    return resolved


__all__ = ["load_config_file", "load_config_with_precedence"]
