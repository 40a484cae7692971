"""Skill discovery across ranked directories with precedence merge."""

from __future__ import annotations

import os
import sys
from pathlib import Path

from skillkit.config import Config
from skillkit.frontmatter import parse_frontmatter, resolve_skill_metadata
from skillkit.loader import SkillLoader, load_skills_from_dir
from skillkit.logging import get_logger
from skillkit.models import SkillEntry, SkillRecord

log = get_logger(__name__)

SOURCE_EXTRA = "skillkit-extra"
SOURCE_BUNDLED = "skillkit-bundled"
SOURCE_MANAGED = "skillkit-managed"
SOURCE_WORKSPACE = "skillkit-workspace"

# Lowest to highest; later sources replace earlier entries with the same name.
SOURCE_PRECEDENCE: tuple[str, ...] = (
    SOURCE_EXTRA,
    SOURCE_BUNDLED,
    SOURCE_MANAGED,
    SOURCE_WORKSPACE,
)

BUNDLED_SKILLS_DIR_ENV = "SKILLKIT_BUNDLED_SKILLS_DIR"
WORKSPACE_SKILLS_DIRNAME = "skills"


def resolve_user_path(raw: str | Path) -> Path:
    """Expand ``~`` and make the path absolute."""
    return Path(str(raw).strip()).expanduser().resolve()


def resolve_bundled_skills_dir() -> Path | None:
    """Locate the bundled skills directory.

    Order: the ``SKILLKIT_BUNDLED_SKILLS_DIR`` override, a ``skills/`` folder
    next to the running executable, then ``skills/`` at the package root.
    """
    override = os.environ.get(BUNDLED_SKILLS_DIR_ENV, "").strip()
    if override:
        return Path(override).expanduser()

    try:
        sibling = Path(sys.executable).resolve().parent / "skills"
        if sibling.is_dir():
            return sibling
    except OSError:
        pass

    package_root = Path(__file__).resolve().parent.parent
    candidate = package_root / "skills"
    if candidate.is_dir():
        return candidate
    return None


def _load_source(loader: SkillLoader, directory: Path, source: str) -> list[SkillRecord]:
    try:
        result = loader(directory, source)
    except OSError as exc:
        log.debug("Skill directory could not be loaded", directory=str(directory), source=source, error=str(exc))
        return []
    return list(result.skills)


def _annotate(skill: SkillRecord) -> SkillEntry:
    frontmatter: dict[str, str] = {}
    try:
        raw = Path(skill.file_path).read_text(encoding="utf-8")
        frontmatter = parse_frontmatter(raw)
    except (OSError, UnicodeDecodeError) as exc:
        log.debug("Skill metadata unavailable", skill_name=skill.name, error=str(exc))
    return SkillEntry(
        skill=skill,
        frontmatter=frontmatter,
        metadata=resolve_skill_metadata(frontmatter),
    )


def _resolve_skill_roots(
    workspace_dir: Path,
    cfg: Config | None,
    managed_skills_dir: str | Path | None,
    bundled_skills_dir: str | Path | None,
) -> list[tuple[str, Path]]:
    roots: list[tuple[str, Path]] = []

    extra_dirs = cfg.skills.load.extra_dirs if cfg else []
    for raw in extra_dirs:
        if isinstance(raw, str) and raw.strip():
            roots.append((SOURCE_EXTRA, resolve_user_path(raw)))

    bundled: Path | None
    if bundled_skills_dir is not None:
        bundled = Path(bundled_skills_dir)
    elif cfg and cfg.skills.bundled_dir.strip():
        bundled = resolve_user_path(cfg.skills.bundled_dir)
    else:
        bundled = resolve_bundled_skills_dir()
    if bundled is not None:
        roots.append((SOURCE_BUNDLED, bundled))

    if managed_skills_dir is not None:
        managed = Path(managed_skills_dir)
    else:
        managed = resolve_user_path((cfg or Config()).skills.managed_dir)
    roots.append((SOURCE_MANAGED, managed))

    roots.append((SOURCE_WORKSPACE, workspace_dir / WORKSPACE_SKILLS_DIRNAME))
    return roots


def load_workspace_skill_entries(
    workspace_dir: str | Path,
    cfg: Config | None = None,
    *,
    managed_skills_dir: str | Path | None = None,
    bundled_skills_dir: str | Path | None = None,
    loader: SkillLoader | None = None,
) -> list[SkillEntry]:
    """Load skills from every source and merge them by name.

    Precedence is extra < bundled < managed < workspace. Each surviving skill
    is annotated with its frontmatter and capability metadata.
    """
    load = loader or load_skills_from_dir
    workspace = resolve_user_path(workspace_dir)
    merged: dict[str, SkillRecord] = {}
    for source, root in _resolve_skill_roots(workspace, cfg, managed_skills_dir, bundled_skills_dir):
        for skill in _load_source(load, root, source):
            merged[skill.name] = skill
    entries = [_annotate(skill) for skill in merged.values()]
    log.debug("Loaded skill entries", workspace=str(workspace), count=len(entries))
    return entries
