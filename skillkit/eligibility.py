"""Eligibility filtering of merged skill entries."""

from __future__ import annotations

import os
import shutil
from collections.abc import Mapping
from typing import Any

from skillkit.config import Config, SkillEntryConfig
from skillkit.logging import get_logger
from skillkit.models import SkillEntry

log = get_logger(__name__)

# Values assumed for requires.config paths that the config tree leaves unset.
DEFAULT_CONFIG_VALUES: dict[str, Any] = {
    "browser.enabled": True,
}

_MISSING = object()


def has_binary(name: str) -> bool:
    """Return True when ``name`` is an executable somewhere on PATH."""
    return shutil.which(name) is not None


def is_truthy(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return bool(value.strip())
    return True


def _config_tree(config: Config | Mapping[str, Any] | None) -> Any:
    if isinstance(config, Config):
        return config.as_tree()
    return config


def _lookup(tree: Any, path: str) -> Any:
    current = tree
    for part in (part for part in path.split(".") if part):
        if not isinstance(current, Mapping):
            return _MISSING
        if part not in current:
            return _MISSING
        current = current[part]
    return current


def resolve_config_path(config: Config | Mapping[str, Any] | None, path: str) -> Any:
    """Walk a dotted path through the config tree; None when unreachable."""
    value = _lookup(_config_tree(config), path)
    return None if value is _MISSING else value


def _config_defaults(config: Config | Mapping[str, Any] | None) -> dict[str, Any]:
    defaults = dict(DEFAULT_CONFIG_VALUES)
    if isinstance(config, Config):
        defaults.update(config.skills.config_defaults)
    return defaults


def is_config_path_truthy(config: Config | Mapping[str, Any] | None, path: str) -> bool:
    value = _lookup(_config_tree(config), path)
    if value is _MISSING:
        defaults = _config_defaults(config)
        if path in defaults:
            return is_truthy(defaults[path])
        return False
    return is_truthy(value)


def resolve_skill_key(entry: SkillEntry) -> str:
    if entry.metadata and entry.metadata.skill_key:
        return entry.metadata.skill_key
    return entry.name


def resolve_skill_config(cfg: Config | None, skill_key: str) -> SkillEntryConfig | None:
    if cfg is None or not skill_key:
        return None
    return cfg.skills.entries.get(skill_key)


def _unmet_requirement(entry: SkillEntry, cfg: Config | None, entry_cfg: SkillEntryConfig | None) -> str | None:
    requires = entry.metadata.requires if entry.metadata else None
    if requires is None:
        return None

    for bin_name in requires.bins:
        if not has_binary(bin_name):
            return f"missing binary: {bin_name}"

    primary_env = entry.metadata.primary_env if entry.metadata else None
    for env_name in requires.env:
        if os.environ.get(env_name):
            continue
        if entry_cfg and entry_cfg.env.get(env_name):
            continue
        if entry_cfg and entry_cfg.api_key and primary_env == env_name:
            continue
        return f"missing env: {env_name}"

    for config_path in requires.config:
        if not is_config_path_truthy(cfg, config_path):
            return f"config not set: {config_path}"
    return None


def should_include_skill(entry: SkillEntry, cfg: Config | None = None) -> bool:
    """Decide whether one skill is eligible.

    An explicit ``enabled: false`` always excludes; ``always: true`` skips the
    requirement checks; otherwise every declared binary, env var and config
    path must be satisfied.
    """
    entry_cfg = resolve_skill_config(cfg, resolve_skill_key(entry))
    if entry_cfg and entry_cfg.enabled is False:
        log.debug("Skill disabled by config", skill_name=entry.name)
        return False
    if entry.metadata and entry.metadata.always is True:
        return True
    reason = _unmet_requirement(entry, cfg, entry_cfg)
    if reason:
        log.debug("Skill requirements not met", skill_name=entry.name, reason=reason)
        return False
    return True


def filter_skill_entries(entries: list[SkillEntry], cfg: Config | None = None) -> list[SkillEntry]:
    """Filter loaded skills by config/metadata requirements."""
    return [entry for entry in entries if should_include_skill(entry, cfg)]
