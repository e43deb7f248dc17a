"""Fact graph export engine."""

from __future__ import annotations

from .errors import (
    ExportCancelled,
    ExportError,
    FormatterError,
    ResolverError,
    SinkFailure,
    SourceFailure,
    StoreSetupError,
)
from .formatters import FactualFormatter, JsonFormatter, OutputFormatter, build_formatter
from .pipeline import DEFAULT_EXPORT_BATCH_SIZE, ExportPipeline, ExportResult
from .resolve import index_candidates, resolve

__all__ = [
    "DEFAULT_EXPORT_BATCH_SIZE",
    "ExportCancelled",
    "ExportError",
    "ExportPipeline",
    "ExportResult",
    "FactualFormatter",
    "FormatterError",
    "JsonFormatter",
    "OutputFormatter",
    "ResolverError",
    "SinkFailure",
    "SourceFailure",
    "StoreSetupError",
    "build_formatter",
    "index_candidates",
    "resolve",
]
