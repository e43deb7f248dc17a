"""Port for the byte stream an export is written to."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class OutputSink(Protocol):
    """Blocking byte sink; a write returns once the bytes have been accepted."""

    def write(self, data: bytes, /) -> object: ...

    def flush(self) -> None: ...


__all__ = ["OutputSink"]
