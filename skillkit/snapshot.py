"""Eligible-skill snapshots and prompt construction."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from skillkit.config import Config
from skillkit.eligibility import filter_skill_entries, resolve_skill_key
from skillkit.loader import format_skills_for_prompt
from skillkit.models import SkillEntry, SkillSnapshot, SkillSnapshotSkill
from skillkit.sources import load_workspace_skill_entries


def filter_workspace_skill_entries(entries: list[SkillEntry], cfg: Config | None = None) -> list[SkillEntry]:
    return filter_skill_entries(entries, cfg)


def _eligible_entries(
    workspace_dir: str | Path,
    cfg: Config | None,
    entries: list[SkillEntry] | None,
    managed_skills_dir: str | Path | None,
    bundled_skills_dir: str | Path | None,
) -> list[SkillEntry]:
    if entries is None:
        entries = load_workspace_skill_entries(
            workspace_dir,
            cfg,
            managed_skills_dir=managed_skills_dir,
            bundled_skills_dir=bundled_skills_dir,
        )
    return filter_skill_entries(entries, cfg)


def build_workspace_skill_snapshot(
    workspace_dir: str | Path,
    cfg: Config | None = None,
    *,
    entries: list[SkillEntry] | None = None,
    managed_skills_dir: str | Path | None = None,
    bundled_skills_dir: str | Path | None = None,
) -> SkillSnapshot:
    """Build the prompt plus the (name, primary env) list of eligible skills."""
    eligible = _eligible_entries(workspace_dir, cfg, entries, managed_skills_dir, bundled_skills_dir)
    return SkillSnapshot(
        prompt=format_skills_for_prompt([entry.skill for entry in eligible]),
        skills=[
            SkillSnapshotSkill(
                name=entry.name,
                primary_env=entry.metadata.primary_env if entry.metadata else None,
                skill_key=resolve_skill_key(entry),
            )
            for entry in eligible
        ],
    )


def build_workspace_skills_prompt(
    workspace_dir: str | Path,
    cfg: Config | None = None,
    *,
    entries: list[SkillEntry] | None = None,
    managed_skills_dir: str | Path | None = None,
    bundled_skills_dir: str | Path | None = None,
) -> str:
    eligible = _eligible_entries(workspace_dir, cfg, entries, managed_skills_dir, bundled_skills_dir)
    return format_skills_for_prompt([entry.skill for entry in eligible])


def snapshot_to_dict(snapshot: SkillSnapshot) -> dict[str, Any]:
    """Serialize snapshot for storing in session metadata."""
    return {
        "prompt": snapshot.prompt,
        "skills": [
            {"name": item.name, "skill_key": item.skill_key, "primary_env": item.primary_env}
            for item in snapshot.skills
        ],
    }


def snapshot_from_dict(payload: Any) -> SkillSnapshot | None:
    """Restore a snapshot from session metadata; None for malformed payloads."""
    if not isinstance(payload, dict):
        return None
    skills_raw = payload.get("skills")
    if not isinstance(skills_raw, list):
        return None

    skills: list[SkillSnapshotSkill] = []
    for item in skills_raw:
        if not isinstance(item, dict):
            continue
        name = str(item.get("name") or "").strip()
        if not name:
            continue
        primary_env = str(item.get("primary_env") or "").strip() or None
        skill_key = str(item.get("skill_key") or "").strip() or name
        skills.append(SkillSnapshotSkill(name=name, primary_env=primary_env, skill_key=skill_key))
    return SkillSnapshot(prompt=str(payload.get("prompt") or ""), skills=skills)
