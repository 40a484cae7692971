"""Default skill content loader and prompt formatter."""

from __future__ import annotations

import html
import re
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from skillkit.frontmatter import parse_frontmatter
from skillkit.logging import get_logger
from skillkit.models import SkillLoadResult, SkillRecord

log = get_logger(__name__)

SKILL_FILENAME = "SKILL.md"
_MAX_DESCRIPTION_CHARS = 200


class SkillLoader(Protocol):
    def __call__(self, directory: Path, source: str) -> SkillLoadResult: ...


def _iter_skill_files(root: Path) -> list[Path]:
    candidates: list[Path] = []
    direct = root / SKILL_FILENAME
    if direct.is_file():
        candidates.append(direct)
    children = sorted((item for item in root.iterdir() if item.is_dir()), key=lambda item: item.name.lower())
    for child in children:
        skill_md = child / SKILL_FILENAME
        if skill_md.is_file():
            candidates.append(skill_md)
    return candidates


def _load_record(skill_md: Path, source: str) -> SkillRecord | None:
    try:
        raw = skill_md.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        log.debug("Skipping unreadable skill file", path=str(skill_md), error=str(exc))
        return None
    frontmatter = parse_frontmatter(raw)
    name = frontmatter.get("name", "").strip() or skill_md.parent.name.strip()
    if not name:
        return None
    description = frontmatter.get("description", "").strip() or f"Skill instructions from {skill_md.parent.name}"
    description = re.sub(r"\s+", " ", description)[:_MAX_DESCRIPTION_CHARS]
    return SkillRecord(
        name=name,
        description=description,
        file_path=str(skill_md.resolve()),
        base_dir=str(skill_md.parent.resolve()),
        source=source,
    )


def load_skills_from_dir(directory: Path | str, source: str) -> SkillLoadResult:
    """Load skill records from ``directory`` and its immediate children.

    A missing directory produces an empty result. When two files declare the
    same name, the first one found is kept.
    """
    root = Path(directory)
    if not root.is_dir():
        return SkillLoadResult()
    records: list[SkillRecord] = []
    seen: set[str] = set()
    for skill_md in _iter_skill_files(root):
        record = _load_record(skill_md, source)
        if record is None or record.name in seen:
            continue
        seen.add(record.name)
        records.append(record)
    return SkillLoadResult(skills=records)


def format_skills_for_prompt(skills: Sequence[SkillRecord]) -> str:
    if not skills:
        return ""
    lines = ["<available_skills>"]
    for skill in skills:
        lines.append("  <skill>")
        lines.append(f"    <name>{html.escape(skill.name)}</name>")
        lines.append(f"    <description>{html.escape(skill.description)}</description>")
        lines.append(f"    <location>{html.escape(skill.file_path)}</location>")
        lines.append("  </skill>")
    lines.append("</available_skills>")
    return "\n".join(lines)
