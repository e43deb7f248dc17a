"""Failures that abort an export run.

An unresolved predecessor reference is not among them: it is an ordinary
outcome of resolution and only drops the affected fact.
"""

from __future__ import annotations


class ExportError(RuntimeError):
    """Base class for fatal export failures."""


class StoreSetupError(ExportError):
    """Raised when the store is unreachable or holds no fact dataset."""


class SourceFailure(ExportError):
    """Raised when a batch cannot be read from the store."""


class ResolverError(ExportError):
    """Raised when resolution itself breaks, as opposed to finding no match."""


class FormatterError(ExportError):
    """Raised when a resolved fact cannot be rendered in the chosen format."""


class SinkFailure(ExportError):
    """Raised when the output sink rejects written bytes."""


class ExportCancelled(ExportError):
    """Raised when a run is stopped before the source is exhausted."""
