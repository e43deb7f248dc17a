"""Predecessor resolution for raw fact rows.

Responsibilities of this stage:
- bind every declared predecessor reference to a member of the row's own
  candidate set, matching exactly on ``(fact_type, content_hash)``
- keep role names, role cardinality and sequence order as declared
- report the first reference without a candidate as ``UnresolvedReference``

Out of scope for this stage:
- deciding what happens to unresolved facts (the pipeline drops them)
- looking at candidates of any other row
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from factexport.domain.model import (
    PredecessorReference,
    ResolvedFact,
    ResolvedPredecessor,
    UnresolvedReference,
)

from .errors import ResolverError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from factexport.domain.model import (
        DeclaredRole,
        FactKey,
        RawFactRow,
        ResolutionResult,
        ResolvedRole,
    )

type CandidateIndex = dict[FactKey, ResolvedPredecessor]


class _Miss(Exception):  # noqa: N818
    def __init__(self, reference: PredecessorReference, position: int | None) -> None:
        super().__init__(reference)
        self.reference = reference
        self.position = position


def index_candidates(candidates: Iterable[ResolvedPredecessor]) -> CandidateIndex:
    """Index candidates by identity; the first of several equal keys wins."""

    index: CandidateIndex = {}
    for candidate in candidates:
        index.setdefault(candidate.key, candidate)
    return index


def resolve(row: RawFactRow) -> ResolutionResult:
    """Resolve ``row`` against its candidate set.

    Returns a ``ResolvedFact`` when every reference matched, otherwise the
    ``UnresolvedReference`` for the first miss in declaration order. Malformed
    declarations raise ``ResolverError``.
    """

    index = index_candidates(row.candidate_predecessors)
    predecessors: dict[str, ResolvedRole] = {}
    for role, declared in row.declared_predecessors.items():
        try:
            predecessors[role] = _resolve_role(role, declared, index)
        except _Miss as miss:
            return UnresolvedReference(
                surrogate_id=row.surrogate_id,
                fact_type=row.fact_type,
                role=role,
                reference=miss.reference,
                position=miss.position,
            )

    return ResolvedFact(
        surrogate_id=row.surrogate_id,
        content_hash=row.content_hash,
        fact_type=row.fact_type,
        fields=row.fields,
        predecessors=predecessors,
    )


def _resolve_role(role: str, declared: DeclaredRole, index: CandidateIndex) -> ResolvedRole:
    if isinstance(declared, PredecessorReference):
        return _lookup(declared, index, position=None)
    if isinstance(declared, tuple):
        return tuple(
            _lookup(_require_reference(role, item), index, position=position)
            for position, item in enumerate(declared)
        )
    raise ResolverError(
        f"Role {role!r} holds {type(declared).__name__}, expected a reference or a sequence"
    )


def _require_reference(role: str, item: object) -> PredecessorReference:
    if not isinstance(item, PredecessorReference):
        raise ResolverError(f"Role {role!r} contains {type(item).__name__}, expected a reference")
    return item


def _lookup(
    reference: PredecessorReference,
    index: CandidateIndex,
    *,
    position: int | None,
) -> ResolvedPredecessor:
    candidate = index.get(reference.key)
    if candidate is None:
        raise _Miss(reference, position)
    return candidate
