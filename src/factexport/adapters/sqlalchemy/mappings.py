"""SQLAlchemy table metadata for the fact store schema.

The export only reads these tables; the metadata mirrors the layout written by
the Jinaga PostgreSQL store so that queries can be expressed with SQLAlchemy
Core and the same schema can be created on SQLite for tests.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB

if TYPE_CHECKING:
    from sqlalchemy.engine import Connection, Engine

FACT_TABLE_NAME = "fact"

JSONDocument = JSON().with_variant(JSONB(), "postgresql")

metadata = MetaData(
    naming_convention={
        "ix": "ix_%(column_0_label)s",
        "uq": "uq_%(table_name)s_%(column_0_label)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s",
    }
)

fact_type_table = Table(
    "fact_type",
    metadata,
    Column("fact_type_id", Integer, primary_key=True),
    Column("name", String, nullable=False, unique=True),
)

fact_table = Table(
    FACT_TABLE_NAME,
    metadata,
    Column("fact_id", Integer, primary_key=True),
    Column(
        "fact_type_id",
        Integer,
        ForeignKey("fact_type.fact_type_id"),
        nullable=False,
    ),
    Column("hash", String, nullable=False),
    Column("data", JSONDocument, nullable=False),
    Column("date_learned", DateTime(timezone=True), nullable=True),
    UniqueConstraint("hash", "fact_type_id"),
)

role_table = Table(
    "role",
    metadata,
    Column("role_id", Integer, primary_key=True),
    Column(
        "defining_fact_type_id",
        Integer,
        ForeignKey("fact_type.fact_type_id"),
        nullable=False,
    ),
    Column("name", String, nullable=False),
    UniqueConstraint("defining_fact_type_id", "name"),
)

edge_table = Table(
    "edge",
    metadata,
    Column("role_id", Integer, ForeignKey("role.role_id"), nullable=False),
    Column("successor_fact_id", Integer, ForeignKey("fact.fact_id"), nullable=False),
    Column("predecessor_fact_id", Integer, ForeignKey("fact.fact_id"), nullable=False),
    UniqueConstraint("successor_fact_id", "predecessor_fact_id", "role_id"),
    Index(None, "predecessor_fact_id", "role_id"),
)


def create_all_tables(bind: Engine | Connection) -> None:
    """Create the fact schema (used for local stores and tests)."""

    metadata.create_all(bind)
