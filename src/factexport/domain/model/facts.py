"""Fact records flowing through an export run.

Surrogate ids are run-local labels assigned by the store. Identity is always the
``(fact_type, content_hash)`` pair; the surrogate id only serves as a readable
cross-reference in the declarative output.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

type FieldValue = str | int | float | bool | None
type FactKey = tuple[str, str]


@dataclass(frozen=True, slots=True)
class PredecessorReference:
    """A predecessor as declared inside a fact, before resolution."""

    content_hash: str
    fact_type: str

    @property
    def key(self) -> FactKey:
        return (self.fact_type, self.content_hash)


@dataclass(frozen=True, slots=True)
class ResolvedPredecessor:
    """A predecessor reference bound to the surrogate id of a concrete fact."""

    surrogate_id: int
    content_hash: str
    fact_type: str

    @property
    def key(self) -> FactKey:
        return (self.fact_type, self.content_hash)


type DeclaredRole = PredecessorReference | tuple[PredecessorReference, ...]
type ResolvedRole = ResolvedPredecessor | tuple[ResolvedPredecessor, ...]


def _freeze[TValue](mapping: Mapping[str, TValue]) -> Mapping[str, TValue]:
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True, slots=True)
class RawFactRow:
    """One row as delivered by a fact store cursor."""

    surrogate_id: int
    content_hash: str
    fact_type: str
    fields: Mapping[str, FieldValue]
    declared_predecessors: Mapping[str, DeclaredRole]
    candidate_predecessors: tuple[ResolvedPredecessor, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", _freeze(self.fields))
        object.__setattr__(self, "declared_predecessors", _freeze(self.declared_predecessors))
        object.__setattr__(self, "candidate_predecessors", tuple(self.candidate_predecessors))


@dataclass(frozen=True, slots=True)
class ResolvedFact:
    """A fact whose every declared predecessor matched its candidate set."""

    surrogate_id: int
    content_hash: str
    fact_type: str
    fields: Mapping[str, FieldValue]
    predecessors: Mapping[str, ResolvedRole]

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", _freeze(self.fields))
        object.__setattr__(self, "predecessors", _freeze(self.predecessors))

    @property
    def key(self) -> FactKey:
        return (self.fact_type, self.content_hash)


@dataclass(frozen=True, slots=True)
class UnresolvedReference:
    """Outcome of a resolution attempt that found no candidate for a reference."""

    surrogate_id: int
    fact_type: str
    role: str
    reference: PredecessorReference
    position: int | None = None

    def describe(self) -> str:
        slot = self.role if self.position is None else f"{self.role}[{self.position}]"
        return (
            f"f{self.surrogate_id} ({self.fact_type}) role {slot} -> "
            f"{self.reference.fact_type} {self.reference.content_hash}"
        )


type ResolutionResult = ResolvedFact | UnresolvedReference
