from pathlib import Path

import pytest

import skillkit.sources as sources_module
from skillkit.config import Config
from skillkit.loader import load_skills_from_dir
from skillkit.models import SkillLoadResult, SkillRecord
from skillkit.sources import (
    BUNDLED_SKILLS_DIR_ENV,
    SOURCE_BUNDLED,
    SOURCE_EXTRA,
    SOURCE_MANAGED,
    SOURCE_WORKSPACE,
    load_workspace_skill_entries,
    resolve_bundled_skills_dir,
)


def _write_skill(
    base_dir: Path,
    name: str,
    description: str = "demo",
    extra_frontmatter: str = "",
    body: str = "# Demo\n",
) -> Path:
    skill_dir = base_dir / name
    skill_dir.mkdir(parents=True, exist_ok=True)
    frontmatter_lines = [
        "---",
        f"name: {name}",
        f"description: {description}",
    ]
    if extra_frontmatter.strip():
        frontmatter_lines.extend(extra_frontmatter.strip().splitlines())
    frontmatter_lines.append("---")
    frontmatter = "\n".join(frontmatter_lines)
    (skill_dir / "SKILL.md").write_text(f"{frontmatter}\n\n{body}", encoding="utf-8")
    return skill_dir


def _layout(tmp_path: Path) -> dict[str, Path]:
    dirs = {
        "extra": tmp_path / "extra",
        "bundled": tmp_path / "bundled",
        "managed": tmp_path / "managed",
        "workspace": tmp_path / "workspace",
    }
    for path in dirs.values():
        path.mkdir(parents=True, exist_ok=True)
    return dirs


def test_merge_keeps_highest_precedence_version_per_name(tmp_path: Path):
    dirs = _layout(tmp_path)
    cfg = Config()
    cfg.skills.load.extra_dirs = [str(dirs["extra"])]

    for shared in ("all-four", "no-workspace", "extra-bundled"):
        _write_skill(dirs["extra"], shared, description="from extra")
        _write_skill(dirs["bundled"], shared, description="from bundled")
    _write_skill(dirs["managed"], "all-four", description="from managed")
    _write_skill(dirs["managed"], "no-workspace", description="from managed")
    _write_skill(dirs["workspace"] / "skills", "all-four", description="from workspace")
    _write_skill(dirs["extra"], "extra-only", description="from extra")

    entries = load_workspace_skill_entries(
        dirs["workspace"],
        cfg,
        managed_skills_dir=dirs["managed"],
        bundled_skills_dir=dirs["bundled"],
    )
    by_name = {entry.name: entry for entry in entries}

    assert len(entries) == len(by_name) == 4
    assert by_name["all-four"].skill.description == "from workspace"
    assert by_name["all-four"].skill.source == SOURCE_WORKSPACE
    assert by_name["no-workspace"].skill.source == SOURCE_MANAGED
    assert by_name["extra-bundled"].skill.source == SOURCE_BUNDLED
    assert by_name["extra-only"].skill.source == SOURCE_EXTRA


def test_entries_are_annotated_with_frontmatter_and_metadata(tmp_path: Path):
    dirs = _layout(tmp_path)
    _write_skill(
        dirs["workspace"] / "skills",
        "event-planner",
        extra_frontmatter=(
            'metadata: {"clawdis":{"requires":{"bins":["uv"],"env":["GOOGLE_PLACES_API_KEY"]},'
            '"install":[{"id":"uv-brew","kind":"brew","formula":"uv"}]}}'
        ),
    )

    entries = load_workspace_skill_entries(
        dirs["workspace"],
        Config(),
        managed_skills_dir=dirs["managed"],
        bundled_skills_dir=dirs["bundled"],
    )

    assert len(entries) == 1
    entry = entries[0]
    assert entry.frontmatter["name"] == "event-planner"
    assert entry.metadata is not None
    assert entry.metadata.requires is not None
    assert entry.metadata.requires.bins == ["uv"]
    assert entry.metadata.install[0].id == "uv-brew"


def test_unreadable_skill_file_degrades_to_no_metadata(tmp_path: Path):
    dirs = _layout(tmp_path)
    good_dir = _write_skill(dirs["workspace"] / "skills", "good", extra_frontmatter='metadata: {"clawdis":{"always":true}}')
    ghost_file = tmp_path / "ghost" / "SKILL.md"

    def _loader(directory: Path, source: str) -> SkillLoadResult:
        result = load_skills_from_dir(directory, source)
        if source == SOURCE_WORKSPACE:
            result.skills.append(
                SkillRecord(
                    name="ghost",
                    description="missing file",
                    file_path=str(ghost_file),
                    base_dir=str(ghost_file.parent),
                    source=source,
                )
            )
        return result

    entries = load_workspace_skill_entries(
        dirs["workspace"],
        Config(),
        managed_skills_dir=dirs["managed"],
        bundled_skills_dir=dirs["bundled"],
        loader=_loader,
    )
    by_name = {entry.name: entry for entry in entries}

    assert by_name["ghost"].frontmatter == {}
    assert by_name["ghost"].metadata is None
    assert by_name["good"].metadata is not None
    assert by_name["good"].skill.base_dir == str(good_dir.resolve())


def test_loader_os_error_yields_empty_source(tmp_path: Path):
    dirs = _layout(tmp_path)
    _write_skill(dirs["workspace"] / "skills", "kept")

    def _loader(directory: Path, source: str) -> SkillLoadResult:
        if source == SOURCE_MANAGED:
            raise PermissionError("denied")

        return load_skills_from_dir(directory, source)

    entries = load_workspace_skill_entries(
        dirs["workspace"],
        Config(),
        managed_skills_dir=dirs["managed"],
        bundled_skills_dir=dirs["bundled"],
        loader=_loader,
    )

    assert [entry.name for entry in entries] == ["kept"]


def test_missing_directories_yield_no_entries(tmp_path: Path):
    entries = load_workspace_skill_entries(
        tmp_path / "nowhere",
        Config(),
        managed_skills_dir=tmp_path / "no-managed",
        bundled_skills_dir=tmp_path / "no-bundled",
    )

    assert entries == []


def test_extra_dirs_expand_user_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    _write_skill(tmp_path / "my-skills", "home-skill")
    cfg = Config()
    cfg.skills.load.extra_dirs = ["  ", "~/my-skills"]

    entries = load_workspace_skill_entries(
        tmp_path / "workspace",
        cfg,
        managed_skills_dir=tmp_path / "managed",
        bundled_skills_dir=tmp_path / "bundled",
    )

    assert [entry.name for entry in entries] == ["home-skill"]
    assert entries[0].skill.source == SOURCE_EXTRA


def test_resolve_bundled_skills_dir_honors_env_override(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv(BUNDLED_SKILLS_DIR_ENV, f"  {tmp_path}  ")

    assert resolve_bundled_skills_dir() == tmp_path


def test_bundled_dir_from_env_is_loaded(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    bundled = tmp_path / "bundled"
    _write_skill(bundled, "shipped")
    monkeypatch.setenv(BUNDLED_SKILLS_DIR_ENV, str(bundled))

    entries = load_workspace_skill_entries(
        tmp_path / "workspace",
        Config(),
        managed_skills_dir=tmp_path / "managed",
    )

    assert [(entry.name, entry.skill.source) for entry in entries] == [("shipped", SOURCE_BUNDLED)]


def test_deeply_nested_metadata_does_not_abort_loading(tmp_path: Path):
    dirs = _layout(tmp_path)
    skills_dir = dirs["workspace"] / "skills"
    _write_skill(skills_dir, "good")
    _write_skill(skills_dir, "deep", extra_frontmatter="metadata: " + "[" * 100_000 + "]" * 100_000)

    entries = load_workspace_skill_entries(
        dirs["workspace"],
        Config(),
        managed_skills_dir=dirs["managed"],
        bundled_skills_dir=dirs["bundled"],
    )

    by_name = {entry.name: entry for entry in entries}
    assert sorted(by_name) == ["deep", "good"]
    assert by_name["deep"].metadata is None


def _isolate_bundled_lookup(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> tuple[Path, Path]:
    monkeypatch.delenv(BUNDLED_SKILLS_DIR_ENV, raising=False)
    bin_dir = tmp_path / "venv" / "bin"
    bin_dir.mkdir(parents=True)
    package_dir = tmp_path / "install" / "skillkit"
    package_dir.mkdir(parents=True)
    monkeypatch.setattr(sources_module.sys, "executable", str(bin_dir / "python"))
    monkeypatch.setattr(sources_module, "__file__", str(package_dir / "sources.py"))
    return bin_dir, package_dir.parent


def test_resolve_bundled_skills_dir_uses_executable_sibling(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    bin_dir, package_root = _isolate_bundled_lookup(monkeypatch, tmp_path)
    (bin_dir / "skills").mkdir()
    (package_root / "skills").mkdir()

    assert resolve_bundled_skills_dir() == (bin_dir / "skills").resolve()


def test_resolve_bundled_skills_dir_falls_back_to_package_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    _, package_root = _isolate_bundled_lookup(monkeypatch, tmp_path)
    (package_root / "skills").mkdir()

    assert resolve_bundled_skills_dir() == (package_root / "skills").resolve()


def test_resolve_bundled_skills_dir_none_when_nothing_exists(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    _isolate_bundled_lookup(monkeypatch, tmp_path)

    assert resolve_bundled_skills_dir() is None
