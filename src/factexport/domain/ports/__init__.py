"""Domain port definitions for adapters."""

from __future__ import annotations

from .sink import OutputSink
from .source import FactCursor, FactStore

__all__ = [
    "FactCursor",
    "FactStore",
    "OutputSink",
]
