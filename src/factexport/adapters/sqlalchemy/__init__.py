"""SQLAlchemy adapter package for factexport."""

from __future__ import annotations

from .engine import StartupError, configured_engine, is_started, shutdown, startup
from .mappings import (
    create_all_tables,
    edge_table,
    fact_table,
    fact_type_table,
    metadata,
    role_table,
)
from .store import SqlAlchemyFactCursor, SqlAlchemyFactStore

__all__ = [
    "SqlAlchemyFactCursor",
    "SqlAlchemyFactStore",
    "StartupError",
    "configured_engine",
    "create_all_tables",
    "edge_table",
    "fact_table",
    "fact_type_table",
    "is_started",
    "metadata",
    "role_table",
    "shutdown",
    "startup",
]
