"""skillkit - skill discovery, eligibility, activation and dependency install."""

__version__ = "0.1.0"

from skillkit.activation import (
    SkillEnvActivation,
    activate_skill_env,
    activate_skill_env_from_snapshot,
    apply_skill_env_overrides,
    apply_skill_env_overrides_from_snapshot,
)
from skillkit.config import Config
from skillkit.eligibility import filter_skill_entries
from skillkit.install import install_skill
from skillkit.models import SkillEntry, SkillInstallResult, SkillSnapshot
from skillkit.snapshot import build_workspace_skill_snapshot, build_workspace_skills_prompt
from skillkit.sources import load_workspace_skill_entries

__all__ = [
    "Config",
    "SkillEntry",
    "SkillEnvActivation",
    "SkillInstallResult",
    "SkillSnapshot",
    "activate_skill_env",
    "activate_skill_env_from_snapshot",
    "apply_skill_env_overrides",
    "apply_skill_env_overrides_from_snapshot",
    "build_workspace_skill_snapshot",
    "build_workspace_skills_prompt",
    "filter_skill_entries",
    "install_skill",
    "load_workspace_skill_entries",
    "__version__",
]
