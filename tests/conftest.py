from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002
from sqlalchemy.pool import StaticPool

from factexport.adapters.sqlalchemy import create_all_tables, shutdown
from tests.helpers.fact_store import FactSeeder

for _name in ("FACTEXPORT_DATABASE_URI", "FACTEXPORT_DATABASE_SCHEMA", "FACTEXPORT_BATCH_SIZE"):
    os.environ.pop(_name, None)

if TYPE_CHECKING:
    from collections.abc import Iterator


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    # one shared connection so every checkout sees the same in-memory database
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        future=True,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    create_all_tables(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def seeder(sqlite_engine: Engine) -> FactSeeder:
    return FactSeeder(sqlite_engine)


@pytest.fixture(autouse=True)
def reset_adapter_state() -> Iterator[None]:
    shutdown()
    yield
    shutdown()
