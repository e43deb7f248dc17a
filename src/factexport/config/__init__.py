"""Application configuration helpers."""

from __future__ import annotations

from .database import (
    ConnectionParameters,
    DatabaseConfig,
    build_database_url,
    get_database_config,
)
from .env import optional_env_var, parse_positive_int
from .errors import ConfigurationError, MissingConfigurationError
from .export import ExportConfig, get_export_config, parse_output_format
from .logging import configure_logging

__all__ = [
    "ConfigurationError",
    "ConnectionParameters",
    "DatabaseConfig",
    "ExportConfig",
    "MissingConfigurationError",
    "build_database_url",
    "configure_logging",
    "get_database_config",
    "get_export_config",
    "optional_env_var",
    "parse_output_format",
    "parse_positive_int",
]
