"""Configuration management for skillkit."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from skillkit.exceptions import ConfigurationError


# Paths
DEFAULT_CONFIG_DIR = Path("~/.skillkit").expanduser()
DEFAULT_CONFIG_PATH = DEFAULT_CONFIG_DIR / "config.yaml"
DEFAULT_MANAGED_SKILLS_DIR = DEFAULT_CONFIG_DIR / "skills"
LOCAL_CONFIG_FILENAME = "skillkit.yaml"


class SkillEntryConfig(BaseModel):
    """Per-skill overrides keyed by skill key."""

    enabled: bool | None = None
    api_key: str = ""
    env: dict[str, str] = Field(default_factory=dict)


class SkillsLoadConfig(BaseModel):
    """Additional skill directories."""

    extra_dirs: list[str] = Field(default_factory=list)


class SkillsInstallConfig(BaseModel):
    """Dependency installer preferences."""

    prefer_brew: bool = True
    node_manager: str = "npm"
    timeout_seconds: int = 300


class SkillsConfig(BaseModel):
    """Skill discovery, eligibility and install configuration."""

    managed_dir: str = str(DEFAULT_MANAGED_SKILLS_DIR)
    bundled_dir: str = ""
    load: SkillsLoadConfig = Field(default_factory=SkillsLoadConfig)
    install: SkillsInstallConfig = Field(default_factory=SkillsInstallConfig)
    entries: dict[str, SkillEntryConfig] = Field(default_factory=dict)
    # Overlaid on the built-in defaults for requires.config paths unset in the tree.
    config_defaults: dict[str, Any] = Field(default_factory=dict)


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "console"


class Config(BaseSettings):
    """Main configuration for skillkit."""

    skills: SkillsConfig = Field(default_factory=SkillsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = SettingsConfigDict(
        env_prefix="SKILLKIT_",
        env_file=".env",
        env_nested_delimiter="__",
        extra="allow",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        # Environment and .env values override what the YAML file passes in.
        return env_settings, dotenv_settings, init_settings, file_secret_settings

    @classmethod
    def resolve_default_config_path(cls) -> Path:
        """Resolve default config path with local-first precedence."""
        local_path = Path.cwd() / LOCAL_CONFIG_FILENAME
        if local_path.exists():
            return local_path
        return DEFAULT_CONFIG_PATH

    @classmethod
    def from_yaml(cls, path: Path | str | None = None) -> "Config":
        """Load configuration from YAML file."""
        config_path = Path(path).expanduser() if path else cls.resolve_default_config_path()

        if not config_path.exists():
            return cls()

        with open(config_path, encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as exc:
                raise ConfigurationError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ConfigurationError(f"Config root must be a mapping: {config_path}")
        return cls(**data)

    @classmethod
    def load(cls) -> "Config":
        """Load configuration, preferring env vars over YAML."""
        return cls.from_yaml()

    def save(self, path: Path | str | None = None) -> None:
        """Save configuration to YAML file."""
        config_path = Path(path) if path else DEFAULT_CONFIG_PATH
        config_path.parent.mkdir(parents=True, exist_ok=True)

        data = self.model_dump(exclude_none=True)

        with open(config_path, "w", encoding="utf-8") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)

    def as_tree(self) -> dict[str, Any]:
        """Plain nested dict view used for dotted-path lookups."""
        return self.model_dump(mode="python")


# Global config instance
_config: Config | None = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config.load()
    return _config


def set_config(config: Config | None) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config
