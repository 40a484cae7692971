"""Data types shared by skill discovery, eligibility, activation and install."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

InstallKind = Literal["brew", "node", "go", "uv"]
NodeManager = Literal["npm", "pnpm", "yarn"]

INSTALL_KINDS: frozenset[str] = frozenset({"brew", "node", "go", "uv"})
NODE_MANAGERS: frozenset[str] = frozenset({"npm", "pnpm", "yarn"})


@dataclass(frozen=True)
class SkillRecord:
    name: str
    description: str
    file_path: str
    base_dir: str
    source: str


@dataclass
class SkillLoadResult:
    skills: list[SkillRecord] = field(default_factory=list)


@dataclass
class SkillInstallSpec:
    kind: str
    id: str | None = None
    label: str | None = None
    bins: list[str] = field(default_factory=list)
    formula: str | None = None
    package: str | None = None
    module: str | None = None


@dataclass
class SkillRequires:
    bins: list[str] = field(default_factory=list)
    env: list[str] = field(default_factory=list)
    config: list[str] = field(default_factory=list)


@dataclass
class SkillMetadata:
    always: bool | None = None
    skill_key: str | None = None
    primary_env: str | None = None
    emoji: str | None = None
    homepage: str | None = None
    requires: SkillRequires | None = None
    install: list[SkillInstallSpec] = field(default_factory=list)


@dataclass(frozen=True)
class SkillEntry:
    skill: SkillRecord
    frontmatter: dict[str, str] = field(default_factory=dict)
    metadata: SkillMetadata | None = None

    @property
    def name(self) -> str:
        return self.skill.name


@dataclass
class SkillSnapshotSkill:
    name: str
    primary_env: str | None = None
    skill_key: str | None = None


@dataclass
class SkillSnapshot:
    prompt: str
    skills: list[SkillSnapshotSkill] = field(default_factory=list)


@dataclass(frozen=True)
class SkillInstallPreferences:
    prefer_brew: bool = True
    node_manager: NodeManager = "npm"


@dataclass
class CommandResult:
    code: int | None
    stdout: str = ""
    stderr: str = ""


@dataclass
class SkillInstallResult:
    ok: bool
    message: str
    stdout: str = ""
    stderr: str = ""
    code: int | None = None
    skill_name: str = ""
    install_id: str = ""
    command: str = ""
