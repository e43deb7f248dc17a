"""Streaming export pipeline: store cursor -> resolver -> formatter -> sink."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Final

from factexport.domain.model import PipelineState, UnresolvedReference

from .errors import (
    ExportCancelled,
    ExportError,
    FormatterError,
    ResolverError,
    SinkFailure,
    SourceFailure,
    StoreSetupError,
)
from .resolve import resolve

if TYPE_CHECKING:
    from collections.abc import Sequence

    from factexport.domain.model import RawFactRow, ResolutionResult, ResolvedFact
    from factexport.domain.ports import FactCursor, FactStore, OutputSink

    from .formatters import OutputFormatter

DEFAULT_EXPORT_BATCH_SIZE: Final[int] = 1000

type Resolver = Callable[[RawFactRow], ResolutionResult]

log = getLogger(__name__)

_TRANSITIONS: Final[dict[PipelineState, frozenset[PipelineState]]] = {
    PipelineState.IDLE: frozenset({PipelineState.STREAMING, PipelineState.ERRORED}),
    PipelineState.STREAMING: frozenset({PipelineState.DRAINING, PipelineState.ERRORED}),
    PipelineState.DRAINING: frozenset({PipelineState.CLOSED, PipelineState.ERRORED}),
    PipelineState.CLOSED: frozenset(),
    PipelineState.ERRORED: frozenset(),
}


@dataclass(slots=True)
class ExportResult:
    """Outcome of a completed export run."""

    emitted: int = 0
    dropped: int = 0
    batches: int = 0


class ExportPipeline:
    """Drive one export run, one batch at a time.

    The next batch is only requested after the rendered output of the previous
    one has been written and flushed, so memory stays bounded by a single batch
    of rows plus its rendered bytes. Facts are emitted in exactly the order the
    cursor yields them. Facts with unresolvable predecessors are dropped and
    counted; every other failure is fatal and leaves the pipeline ``ERRORED``
    with the cursor closed.
    """

    def __init__(
        self,
        *,
        store: FactStore,
        formatter: OutputFormatter,
        sink: OutputSink,
        batch_size: int = DEFAULT_EXPORT_BATCH_SIZE,
        resolver: Resolver = resolve,
    ) -> None:
        if batch_size <= 0:
            raise ValueError(f"Batch size must be positive, got {batch_size}")
        self.store = store
        self.formatter = formatter
        self.sink = sink
        self.batch_size = batch_size
        self._resolver = resolver
        self._state = PipelineState.IDLE
        self._cursor: FactCursor | None = None
        self._cancel_requested = False
        self.result = ExportResult()

    @property
    def state(self) -> PipelineState:
        return self._state

    def cancel(self) -> None:
        """Ask the run to stop before pulling the next batch."""

        self._cancel_requested = True

    def run(self) -> ExportResult:
        if self._state is not PipelineState.IDLE:
            raise RuntimeError(f"Pipeline cannot run from state {self._state}")

        log.info(
            "Starting export: format=%s, batch_size=%s",
            self.formatter.format,
            self.batch_size,
        )
        try:
            self._cursor = self._open_cursor()
            self._transition(PipelineState.STREAMING)
            self._write(self.formatter.header())
            while (batch := self._next_batch()):
                self._process_batch(batch)

            self._transition(PipelineState.DRAINING)
            self._write(self.formatter.footer(self.result.emitted))
            self._flush()
            self._close_cursor()
            self._transition(PipelineState.CLOSED)
        except BaseException:
            self._abort()
            raise

        if self.result.dropped:
            log.warning(
                "Dropped %s fact(s) with unresolvable predecessors",
                self.result.dropped,
            )
        log.info(
            "Finished export: emitted=%s, dropped=%s, batches=%s",
            self.result.emitted,
            self.result.dropped,
            self.result.batches,
        )
        return self.result

    # Stages ------------------------------------------------------------------

    def _open_cursor(self) -> FactCursor:
        try:
            if not self.store.exists():
                raise StoreSetupError("Fact dataset does not exist in the store")  # noqa: TRY301
            return self.store.open()
        except ExportError:
            raise
        except Exception as exc:
            raise StoreSetupError(f"Cannot open fact store: {exc}") from exc

    def _next_batch(self) -> Sequence[RawFactRow]:
        if self._cancel_requested:
            raise ExportCancelled("Export cancelled")
        cursor = self._require_cursor()
        try:
            batch = cursor.next_batch(self.batch_size)
        except ExportError:
            raise
        except Exception as exc:
            raise SourceFailure(f"Failed to read batch {self.result.batches + 1}: {exc}") from exc
        if batch:
            self.result.batches += 1
        return batch

    def _process_batch(self, batch: Sequence[RawFactRow]) -> None:
        chunks: list[bytes] = []
        for row in batch:
            outcome = self._resolve(row)
            if isinstance(outcome, UnresolvedReference):
                self.result.dropped += 1
                log.debug("Dropping fact with unresolved predecessor: %s", outcome.describe())
                continue
            chunks.append(self._render(outcome))
            self.result.emitted += 1
        self._write(b"".join(chunks))
        self._flush()

    def _resolve(self, row: RawFactRow) -> ResolutionResult:
        try:
            return self._resolver(row)
        except ExportError:
            raise
        except Exception as exc:
            raise ResolverError(f"Resolution of f{row.surrogate_id} failed: {exc}") from exc

    def _render(self, fact: ResolvedFact) -> bytes:
        try:
            return self.formatter.render(fact, self.result.emitted)
        except ExportError:
            raise
        except Exception as exc:
            raise FormatterError(f"Rendering of f{fact.surrogate_id} failed: {exc}") from exc

    # Sink and cursor ---------------------------------------------------------

    def _write(self, data: bytes) -> None:
        if not data:
            return
        try:
            self.sink.write(data)
        except OSError as exc:
            raise SinkFailure(f"Output sink rejected data: {exc}") from exc

    def _flush(self) -> None:
        try:
            self.sink.flush()
        except OSError as exc:
            raise SinkFailure(f"Output sink failed to flush: {exc}") from exc

    def _require_cursor(self) -> FactCursor:
        if self._cursor is None:
            raise RuntimeError("Cursor not open")
        return self._cursor

    def _close_cursor(self) -> None:
        cursor, self._cursor = self._cursor, None
        if cursor is not None:
            cursor.close()

    def _abort(self) -> None:
        self._state = PipelineState.ERRORED
        try:
            self._close_cursor()
        except Exception:
            log.warning("Failed to close cursor after export error", exc_info=True)

    def _transition(self, target: PipelineState) -> None:
        if target not in _TRANSITIONS[self._state]:
            raise RuntimeError(f"Invalid pipeline transition {self._state} -> {target}")
        log.debug("Pipeline %s -> %s", self._state, target)
        self._state = target
