"""Install runtime dependencies declared in a skill's metadata.install block."""

from __future__ import annotations

import shlex
from pathlib import Path

from skillkit.config import Config
from skillkit.eligibility import has_binary
from skillkit.exceptions import InstallCommandError
from skillkit.logging import get_logger
from skillkit.models import (
    NODE_MANAGERS,
    SkillEntry,
    SkillInstallPreferences,
    SkillInstallResult,
    SkillInstallSpec,
)
from skillkit.process import CommandRunner, run_command_with_timeout
from skillkit.sources import load_workspace_skill_entries, resolve_user_path

log = get_logger(__name__)

DEFAULT_INSTALL_TIMEOUT_SECONDS = 300
MIN_INSTALL_TIMEOUT_SECONDS = 1
MAX_INSTALL_TIMEOUT_SECONDS = 900


def resolve_install_id(spec: SkillInstallSpec, index: int) -> str:
    raw = (spec.id or "").strip()
    if raw:
        return raw
    return f"{spec.kind}-{index}"


def list_install_options(entry: SkillEntry) -> list[tuple[str, SkillInstallSpec]]:
    specs = entry.metadata.install if entry.metadata else []
    return [(resolve_install_id(spec, index), spec) for index, spec in enumerate(specs)]


def find_install_spec(entry: SkillEntry, install_id: str) -> SkillInstallSpec | None:
    for resolved_id, spec in list_install_options(entry):
        if resolved_id == install_id:
            return spec
    return None


def resolve_skills_install_preferences(cfg: Config | None = None) -> SkillInstallPreferences:
    if cfg is None:
        return SkillInstallPreferences()
    install_cfg = cfg.skills.install
    manager = str(install_cfg.node_manager or "").strip().lower()
    return SkillInstallPreferences(
        prefer_brew=install_cfg.prefer_brew,
        node_manager=manager if manager in NODE_MANAGERS else "npm",
    )


def build_node_install_command(package_name: str, prefs: SkillInstallPreferences) -> list[str]:
    if prefs.node_manager == "pnpm":
        return ["pnpm", "add", "-g", package_name]
    if prefs.node_manager == "yarn":
        return ["yarn", "global", "add", package_name]
    return ["npm", "install", "-g", package_name]


def build_install_command(spec: SkillInstallSpec, prefs: SkillInstallPreferences) -> list[str]:
    """Turn an install spec into argv.

    Raises:
        InstallCommandError: the spec lacks its kind's required field or the
            kind is not supported.
    """
    if spec.kind == "brew":
        if not spec.formula:
            raise InstallCommandError(spec.kind, "missing brew formula")
        return ["brew", "install", spec.formula]
    if spec.kind == "node":
        if not spec.package:
            raise InstallCommandError(spec.kind, "missing node package")
        return build_node_install_command(spec.package, prefs)
    if spec.kind == "go":
        if not spec.module:
            raise InstallCommandError(spec.kind, "missing go module")
        return ["go", "install", spec.module]
    if spec.kind == "uv":
        if not spec.package:
            raise InstallCommandError(spec.kind, "missing uv package")
        return ["uv", "tool", "install", spec.package]
    raise InstallCommandError(spec.kind, "unsupported installer")


def clamp_install_timeout(timeout_seconds: float | None) -> float:
    value = DEFAULT_INSTALL_TIMEOUT_SECONDS if timeout_seconds is None else timeout_seconds
    return min(max(value, MIN_INSTALL_TIMEOUT_SECONDS), MAX_INSTALL_TIMEOUT_SECONDS)


async def install_skill(
    workspace_dir: str | Path,
    skill_name: str,
    install_id: str,
    *,
    cfg: Config | None = None,
    timeout_seconds: float | None = None,
    runner: CommandRunner | None = None,
    entries: list[SkillEntry] | None = None,
    managed_skills_dir: str | Path | None = None,
    bundled_skills_dir: str | Path | None = None,
) -> SkillInstallResult:
    """Run the installer ``install_id`` declared by ``skill_name``.

    Every outcome is reported as a ``SkillInstallResult``; nothing is retried.
    When a ``uv`` installer is requested and ``uv`` is missing, ``uv`` is
    first installed through ``brew`` if available.
    """
    run = runner or run_command_with_timeout
    if timeout_seconds is None and cfg is not None:
        timeout_seconds = cfg.skills.install.timeout_seconds
    timeout = clamp_install_timeout(timeout_seconds)

    if entries is None:
        entries = load_workspace_skill_entries(
            resolve_user_path(workspace_dir),
            cfg,
            managed_skills_dir=managed_skills_dir,
            bundled_skills_dir=bundled_skills_dir,
        )
    entry = next((item for item in entries if item.name == skill_name), None)
    if entry is None:
        return SkillInstallResult(
            ok=False,
            message=f"Skill not found: {skill_name}",
            skill_name=skill_name,
            install_id=install_id,
        )

    spec = find_install_spec(entry, install_id)
    if spec is None:
        return SkillInstallResult(
            ok=False,
            message=f"Installer not found: {install_id}",
            skill_name=skill_name,
            install_id=install_id,
        )

    prefs = resolve_skills_install_preferences(cfg)
    try:
        argv = build_install_command(spec, prefs)
    except InstallCommandError as exc:
        return SkillInstallResult(
            ok=False,
            message=str(exc),
            skill_name=skill_name,
            install_id=install_id,
        )
    command_text = shlex.join(argv)

    if spec.kind == "uv" and not has_binary("uv"):
        if not has_binary("brew"):
            return SkillInstallResult(
                ok=False,
                message="uv not installed (install via brew)",
                skill_name=skill_name,
                install_id=install_id,
                command=command_text,
            )
        log.info("Bootstrapping uv via brew", skill_name=skill_name, install_id=install_id)
        bootstrap = await run(["brew", "install", "uv"], timeout)
        if bootstrap.code != 0:
            return SkillInstallResult(
                ok=False,
                message="Failed to install uv (brew)",
                stdout=bootstrap.stdout.strip(),
                stderr=bootstrap.stderr.strip(),
                code=bootstrap.code,
                skill_name=skill_name,
                install_id=install_id,
                command="brew install uv",
            )

    log.info("Installing skill dependency", skill_name=skill_name, install_id=install_id, command=command_text)
    result = await run(argv, timeout)
    success = result.code == 0
    if not success:
        log.warning("Skill dependency install failed", skill_name=skill_name, install_id=install_id, code=result.code)
    return SkillInstallResult(
        ok=success,
        message="Installed" if success else "Install failed",
        stdout=result.stdout.strip(),
        stderr=result.stderr.strip(),
        code=result.code,
        skill_name=skill_name,
        install_id=install_id,
        command=command_text,
    )
