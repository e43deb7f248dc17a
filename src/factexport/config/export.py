"""Export run defaults."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from factexport.domain.export.pipeline import DEFAULT_EXPORT_BATCH_SIZE
from factexport.domain.model.enums import OutputFormat

from .env import optional_env_var, parse_positive_int
from .errors import ConfigurationError

BATCH_SIZE_ENV: Final[str] = "FACTEXPORT_BATCH_SIZE"


@dataclass(frozen=True, slots=True)
class ExportConfig:
    format: OutputFormat
    batch_size: int = DEFAULT_EXPORT_BATCH_SIZE


def parse_output_format(value: str) -> OutputFormat:
    try:
        return OutputFormat(value)
    except ValueError as exc:
        choices = ", ".join(f'"{member.value}"' for member in OutputFormat)
        raise ConfigurationError(f"Invalid format {value!r}. Use one of {choices}.") from exc


def get_export_config(*, output_format: str, batch_size: int | None = None) -> ExportConfig:
    """Build the export configuration, reading the batch size from the environment if unset."""

    if batch_size is None:
        env_value = optional_env_var(BATCH_SIZE_ENV)
        batch_size = (
            parse_positive_int(BATCH_SIZE_ENV, env_value)
            if env_value
            else DEFAULT_EXPORT_BATCH_SIZE
        )
    else:
        batch_size = parse_positive_int("batch size", batch_size)
    return ExportConfig(format=parse_output_format(output_format), batch_size=batch_size)
