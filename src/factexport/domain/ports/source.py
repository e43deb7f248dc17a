"""Ports for reading facts from a backing store."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from factexport.domain.model import RawFactRow


@runtime_checkable
class FactCursor(Protocol):
    """Paged, forward-only view over every fact in the store.

    Rows arrive in an order where each fact's predecessors precede it. An empty
    batch signals the end of the stream.
    """

    def next_batch(self, batch_size: int) -> Sequence[RawFactRow]: ...

    def close(self) -> None: ...


@runtime_checkable
class FactStore(Protocol):
    """Queryable store holding the fact dataset."""

    def exists(self) -> bool: ...

    def open(self) -> FactCursor: ...


__all__ = ["FactCursor", "FactStore"]
