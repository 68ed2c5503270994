"""Configuration resolution helpers."""

from __future__ import annotations

from collections.abc import Mapping as MappingABC
from copy import deepcopy
from typing import Any, Dict, Mapping

import yaml
from pydantic import ValidationError

from .exceptions import ConfigError
from .models import CidviewConfig

ENV_PREFIX = "CIDVIEW__"


def resolve_with_precedence(
    *,
    defaults: CidviewConfig,
    file_overrides: Mapping[str, Any] | None = None,
    env_overrides: Mapping[str, Any] | None = None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> CidviewConfig:
    """Merge configuration sources: defaults, then file, environment, and CLI overrides.

    Dotted keys (``rendering.json_indent``) are expanded only at the top level of each
    source, so lookup-table keys such as ``application/vnd.ms-excel`` stay intact.
    Mapping values are merged into the defaults, so the built-in extension table is
    extended. Lists such as ``archive_types`` replace the default wholesale.
    """
    merged = defaults.model_dump(mode="python")
    for name, source in (
        ("file", file_overrides),
        ("environment", env_overrides),
        ("cli", cli_overrides),
    ):
        if source is None:
            continue
        merged = _deep_merge(merged, _expand_dotted(source, source_name=name))

    try:
        return CidviewConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration values: {exc}") from exc


def flatten_for_env(config: CidviewConfig) -> Dict[str, str]:
    """Flatten the config into `CIDVIEW__SECTION__KEY` environment variable mappings."""
    flat: Dict[str, str] = {}
    for section, fields in config.model_dump(mode="python").items():
        for key, value in fields.items():
            env_key = f"{ENV_PREFIX}{section.upper()}__{key.upper()}"
            if isinstance(value, (dict, list)):
                rendered = yaml.safe_dump(value, default_flow_style=True, width=10_000).strip()
            elif isinstance(value, bool):
                rendered = "true" if value else "false"
            else:
                rendered = "null" if value is None else str(value)
            flat[env_key] = rendered
    return flat


def _expand_dotted(source: Mapping[str, Any], *, source_name: str) -> dict[str, Any]:
    if not isinstance(source, MappingABC):
        raise ConfigError(f"{source_name.capitalize()} overrides must be a mapping.")

    result: dict[str, Any] = {}
    for key, value in source.items():
        if not isinstance(key, str):
            raise ConfigError(f"{source_name.capitalize()} override keys must be strings.")
        path = key.split(".")
        node = result
        for segment in path[:-1]:
            existing = node.setdefault(segment, {})
            if not isinstance(existing, dict):
                raise ConfigError(
                    f"{source_name.capitalize()} override for {key} conflicts with existing value."
                )
            node = existing
        leaf = path[-1]
        if isinstance(value, MappingABC) and isinstance(node.get(leaf), MappingABC):
            node[leaf] = _deep_merge(node[leaf], value)
        else:
            node[leaf] = deepcopy(value)
    return result


def _deep_merge(base: Mapping[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    merged: dict[str, Any] = {key: deepcopy(value) for key, value in base.items()}
    for key, value in overrides.items():
        if isinstance(value, MappingABC) and isinstance(merged.get(key), MappingABC):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = deepcopy(value)
    return merged


__all__ = ["ENV_PREFIX", "resolve_with_precedence", "flatten_for_env"]
