"""Public domain model surface."""

from __future__ import annotations

from factexport.domain.model.enums import OutputFormat, PipelineState
from factexport.domain.model.facts import (
    DeclaredRole,
    FactKey,
    FieldValue,
    PredecessorReference,
    RawFactRow,
    ResolutionResult,
    ResolvedFact,
    ResolvedPredecessor,
    ResolvedRole,
    UnresolvedReference,
)

__all__ = [
    "DeclaredRole",
    "FactKey",
    "FieldValue",
    "OutputFormat",
    "PipelineState",
    "PredecessorReference",
    "RawFactRow",
    "ResolutionResult",
    "ResolvedFact",
    "ResolvedPredecessor",
    "ResolvedRole",
    "UnresolvedReference",
]
