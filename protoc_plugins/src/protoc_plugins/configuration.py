from __future__ import annotations

import os
import re
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any, get_args

import yaml
from pydantic import ValidationError

from protoc_plugins.contracts import PluginKind
from protoc_plugins.contracts.config_contracts import PluginConfig

_ENV_VAR_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")
_PLUGIN_KINDS = frozenset(get_args(PluginKind))


class ConfigError(ValueError):
    pass


def load_yaml(path: str | Path) -> dict[str, Any]:
    try:
        with Path(path).open("r", encoding="utf-8") as handle:
            payload = yaml.safe_load(handle) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Plugin configuration {path} is not valid YAML: {exc}") from exc
    if not isinstance(payload, dict):
        raise ConfigError(
            f"Plugin configuration {path} must be a YAML mapping, "
            f"not {type(payload).__name__}"
        )
    return payload


def load_plugin_config(path: str | Path) -> PluginConfig:
    return load_plugin_config_dict(load_yaml(path))


def load_plugin_config_dict(payload: Mapping[str, Any]) -> PluginConfig:
    resolved = resolve_env_vars(payload)
    try:
        return PluginConfig.model_validate(resolved)
    except ValidationError as exc:
        raise ConfigError(_format_validation_error(exc)) from exc


def resolve_env_vars(payload: Any) -> Any:
    """Substitute `${VAR}` references in every string of a plugin configuration."""
    return _resolve_env_vars(payload, location=())


def _resolve_env_vars(payload: Any, *, location: tuple[str | int, ...]) -> Any:
    if isinstance(payload, Mapping):
        return {
            str(key): _resolve_env_vars(value, location=(*location, str(key)))
            for key, value in payload.items()
        }
    if isinstance(payload, list):
        return [
            _resolve_env_vars(value, location=(*location, index))
            for index, value in enumerate(payload)
        ]
    if isinstance(payload, str):
        return _substitute_env(payload, location=location)
    return payload


def _substitute_env(value: str, *, location: tuple[str | int, ...]) -> str:
    def replace(match: re.Match[str]) -> str:
        key = match.group(1)
        env_value = os.environ.get(key)
        if env_value is None:
            raise ConfigError(
                f"Environment variable '{key}' used by plugin configuration "
                f"{_describe_location(location)} is not set"
            )
        return env_value

    return _ENV_VAR_PATTERN.sub(replace, value)


def _format_validation_error(exc: ValidationError) -> str:
    details = [
        f"{_describe_location(error['loc'], tagged=True)}: {error['msg']}"
        for error in exc.errors(include_url=False)
    ]
    return "Invalid plugin configuration: " + "; ".join(details)


def _describe_location(location: Sequence[str | int], *, tagged: bool = False) -> str:
    # ("plugins", 1, "binary-maven", "version") -> "plugins[1] (binary-maven).version"
    if not location:
        return "<root>"
    parts: list[str] = []
    for part in location:
        if isinstance(part, int):
            parts.append(f"[{part}]")
        elif tagged and part in _PLUGIN_KINDS and parts and parts[-1].startswith("["):
            parts.append(f" ({part})")
        else:
            parts.append(f".{part}" if parts else part)
    return "".join(parts)
