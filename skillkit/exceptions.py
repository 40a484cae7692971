"""Custom exceptions for skillkit."""


class SkillkitError(Exception):
    """Base exception for skillkit."""

    pass


class ConfigurationError(SkillkitError):
    """Configuration-related errors."""

    pass


class InstallCommandError(SkillkitError):
    """An install spec could not be turned into a command line."""

    def __init__(self, kind: str, message: str):
        super().__init__(message)
        self.kind = kind
