"""Reversible per-skill environment variable activation."""

from __future__ import annotations

import os
from collections.abc import Callable, Iterable, MutableMapping
from types import TracebackType

from skillkit.config import Config
from skillkit.eligibility import resolve_skill_config, resolve_skill_key
from skillkit.logging import get_logger
from skillkit.models import SkillEntry, SkillSnapshot

log = get_logger(__name__)


class SkillEnvActivation:
    """Holds the variables injected for one activation scope.

    Only variables that are unset (or empty) get written. ``restore`` puts
    every touched variable back to its prior state and does nothing on later
    calls. Use it as a context manager to guarantee the restore.
    """

    def __init__(self, environ: MutableMapping[str, str] | None = None):
        self._environ = os.environ if environ is None else environ
        self._saved: list[tuple[str, str | None]] = []
        self._overrides: dict[str, str] = {}
        self._restored = False

    @property
    def overrides(self) -> dict[str, str]:
        return dict(self._overrides)

    def set_default(self, key: str, value: str) -> bool:
        if self._restored:
            raise RuntimeError("Activation already restored")
        if not key or not value or self._environ.get(key):
            return False
        self._saved.append((key, self._environ.get(key)))
        self._environ[key] = value
        self._overrides[key] = value
        return True

    def restore(self) -> None:
        if self._restored:
            return
        self._restored = True
        for key, previous in reversed(self._saved):
            if previous is None:
                self._environ.pop(key, None)
            else:
                self._environ[key] = previous
        if self._saved:
            log.debug("Restored skill env overrides", keys=[key for key, _ in self._saved])

    def __enter__(self) -> SkillEnvActivation:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.restore()


def _activate(
    skills: Iterable[tuple[str, str | None]],
    cfg: Config | None,
    environ: MutableMapping[str, str] | None,
) -> SkillEnvActivation:
    activation = SkillEnvActivation(environ)
    for skill_key, primary_env in skills:
        entry_cfg = resolve_skill_config(cfg, skill_key)
        if entry_cfg is None:
            continue
        for key, value in entry_cfg.env.items():
            activation.set_default(key, value)
        if primary_env and entry_cfg.api_key:
            activation.set_default(primary_env, entry_cfg.api_key)
    if activation.overrides:
        log.debug("Applied skill env overrides", keys=sorted(activation.overrides))
    return activation


def activate_skill_env(
    entries: list[SkillEntry],
    cfg: Config | None,
    environ: MutableMapping[str, str] | None = None,
) -> SkillEnvActivation:
    """Inject configured env/api-key values for eligible entries."""
    return _activate(
        ((resolve_skill_key(entry), entry.metadata.primary_env if entry.metadata else None) for entry in entries),
        cfg,
        environ,
    )


def activate_skill_env_from_snapshot(
    snapshot: SkillSnapshot | None,
    cfg: Config | None,
    environ: MutableMapping[str, str] | None = None,
) -> SkillEnvActivation:
    """Same as ``activate_skill_env`` but driven by a stored snapshot."""
    activation_skills: list[tuple[str, str | None]] = []
    if snapshot is not None:
        for skill in snapshot.skills:
            key = skill.name
            if cfg is not None and skill.skill_key and skill.skill_key in cfg.skills.entries:
                key = skill.skill_key
            activation_skills.append((key, skill.primary_env))
    return _activate(activation_skills, cfg, environ)


def apply_skill_env_overrides(entries: list[SkillEntry], cfg: Config | None) -> Callable[[], None]:
    """Apply per-skill env/apiKey overrides for one run and return reverter."""
    return activate_skill_env(entries, cfg).restore


def apply_skill_env_overrides_from_snapshot(snapshot: SkillSnapshot | None, cfg: Config | None) -> Callable[[], None]:
    """Snapshot variant of ``apply_skill_env_overrides``."""
    return activate_skill_env_from_snapshot(snapshot, cfg).restore
