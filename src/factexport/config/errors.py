"""Errors raised while assembling database and export settings."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence


class ConfigurationError(RuntimeError):
    """A setting was given but cannot be used (bad port, format or batch size)."""


class MissingConfigurationError(ConfigurationError):
    """Required connection settings are absent from both the flags and the environment."""

    def __init__(self, names: Sequence[str], *, hint: str | None = None) -> None:
        self.names = tuple(names)
        message = f"Missing configuration for: {', '.join(self.names)}"
        if hint:
            message = f"{message} ({hint})"
        super().__init__(message)
