"""Fact store backed by a SQLAlchemy connection."""

from __future__ import annotations

from collections import defaultdict
from logging import getLogger
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError
from sqlalchemy import inspect, select
from sqlalchemy.exc import SQLAlchemyError

from factexport.adapters.sqlalchemy.engine import configured_schema, require_engine
from factexport.adapters.sqlalchemy.mappings import (
    FACT_TABLE_NAME,
    edge_table,
    fact_table,
    fact_type_table,
)
from factexport.adapters.sqlalchemy.schema import FactDataPayload
from factexport.domain.export.errors import SourceFailure, StoreSetupError
from factexport.domain.model import RawFactRow, ResolvedPredecessor

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy import Row, Select
    from sqlalchemy.engine import Connection, Engine

log = getLogger(__name__)

# a single snapshot keeps the edge lookups consistent with the pages already read
_SNAPSHOT_ISOLATION = {"postgresql": "REPEATABLE READ"}


class SqlAlchemyFactStore:
    """Read-only access to the ``fact``/``edge`` tables of a relational store."""

    def __init__(self, engine: Engine | None = None, *, schema: str | None = None) -> None:
        self.engine = engine or require_engine()
        self.schema = schema if engine is not None else (schema or configured_schema())

    def exists(self) -> bool:
        try:
            with self.engine.connect() as connection:
                log.info("Connected to database")
                return inspect(connection).has_table(FACT_TABLE_NAME, schema=self.schema)
        except SQLAlchemyError as exc:
            raise StoreSetupError(f"Error connecting to the database: {exc}") from exc

    def open(self) -> SqlAlchemyFactCursor:
        try:
            connection = self.engine.connect()
        except SQLAlchemyError as exc:
            raise StoreSetupError(f"Error connecting to the database: {exc}") from exc

        options: dict[str, Any] = {}
        isolation_level = _SNAPSHOT_ISOLATION.get(connection.dialect.name)
        if isolation_level is not None:
            options["isolation_level"] = isolation_level
        if self.schema is not None:
            options["schema_translate_map"] = {None: self.schema}
        if options:
            connection = connection.execution_options(**options)
        return SqlAlchemyFactCursor(connection)


class SqlAlchemyFactCursor:
    """Keyset-paginated cursor over ``fact`` ordered by ``fact_id``.

    Each page is followed by one edge query that collects the direct
    predecessors of every fact on the page, so each row carries its own
    candidate set.
    """

    def __init__(self, connection: Connection) -> None:
        self._connection: Connection | None = connection
        self._last_fact_id: int | None = None
        self._exhausted = False

    @property
    def closed(self) -> bool:
        return self._connection is None

    def next_batch(self, batch_size: int) -> Sequence[RawFactRow]:
        if self._connection is None:
            raise SourceFailure("Cursor is closed")
        if self._exhausted:
            return ()

        try:
            rows = self._connection.execute(self._page_statement(batch_size)).all()
            if not rows:
                self._exhausted = True
                return ()
            candidates = self._load_candidates(
                self._connection, [row.fact_id for row in rows]
            )
        except SQLAlchemyError as exc:
            raise SourceFailure(
                f"Error reading facts after id {self._last_fact_id}: {exc}"
            ) from exc

        batch = [self._to_raw_row(row, candidates.get(row.fact_id, ())) for row in rows]
        self._last_fact_id = rows[-1].fact_id
        return batch

    def close(self) -> None:
        connection, self._connection = self._connection, None
        if connection is None:
            return
        try:
            connection.rollback()
        finally:
            connection.close()

    def _page_statement(self, batch_size: int) -> Select[Any]:
        stmt = (
            select(
                fact_table.c.fact_id,
                fact_table.c.hash,
                fact_table.c.data,
                fact_type_table.c.name.label("type_name"),
            )
            .join(fact_type_table, fact_table.c.fact_type_id == fact_type_table.c.fact_type_id)
            .order_by(fact_table.c.fact_id)
            .limit(batch_size)
        )
        if self._last_fact_id is not None:
            stmt = stmt.where(fact_table.c.fact_id > self._last_fact_id)
        return stmt

    @staticmethod
    def _load_candidates(
        connection: Connection,
        fact_ids: list[int],
    ) -> dict[int, list[ResolvedPredecessor]]:
        predecessor = fact_table.alias("predecessor")
        stmt = (
            select(
                edge_table.c.successor_fact_id,
                predecessor.c.fact_id,
                predecessor.c.hash,
                fact_type_table.c.name,
            )
            .select_from(edge_table)
            .join(predecessor, edge_table.c.predecessor_fact_id == predecessor.c.fact_id)
            .join(fact_type_table, predecessor.c.fact_type_id == fact_type_table.c.fact_type_id)
            .where(edge_table.c.successor_fact_id.in_(fact_ids))
            .order_by(edge_table.c.successor_fact_id, predecessor.c.fact_id)
        )
        candidates: dict[int, list[ResolvedPredecessor]] = defaultdict(list)
        for successor_id, fact_id, content_hash, type_name in connection.execute(stmt):
            candidates[successor_id].append(
                ResolvedPredecessor(
                    surrogate_id=fact_id,
                    content_hash=content_hash,
                    fact_type=type_name,
                )
            )
        return candidates

    @staticmethod
    def _to_raw_row(row: Row[Any], candidates: Sequence[ResolvedPredecessor]) -> RawFactRow:
        try:
            if isinstance(row.data, (str, bytes)):
                payload = FactDataPayload.model_validate_json(row.data)
            else:
                payload = FactDataPayload.model_validate(row.data)
        except ValidationError as exc:
            raise SourceFailure(f"Malformed data for fact {row.fact_id}: {exc}") from exc

        return RawFactRow(
            surrogate_id=row.fact_id,
            content_hash=row.hash,
            fact_type=row.type_name,
            fields=payload.field_values(),
            declared_predecessors=payload.declared_predecessors(),
            candidate_predecessors=tuple(candidates),
        )


if TYPE_CHECKING:
    from typing import cast

    from factexport.domain.ports import FactCursor, FactStore

    _store_check: FactStore = SqlAlchemyFactStore(cast("Engine", object()))
    _cursor_check: FactCursor = SqlAlchemyFactCursor(cast("Connection", object()))
