from __future__ import annotations

import pytest
from sqlalchemy import create_engine

from factexport.adapters.sqlalchemy.engine import (
    StartupError,
    configured_engine,
    configured_schema,
    is_started,
    require_engine,
    shutdown,
    startup,
)
from factexport.config import DatabaseConfig


def test_require_engine_before_startup() -> None:
    assert not is_started()

    with pytest.raises(StartupError):
        require_engine()


def test_startup_requires_engine_or_config() -> None:
    with pytest.raises(StartupError, match="configuration"):
        startup()


def test_startup_requires_force_for_reconfiguration() -> None:
    engine_a = create_engine("sqlite+pysqlite:///:memory:", future=True)
    engine_b = create_engine("sqlite+pysqlite:///:memory:", future=True)

    startup(engine=engine_a)

    with pytest.raises(StartupError):
        startup(engine=engine_b)

    startup(engine=engine_b, force=True)
    assert configured_engine() is engine_b


def test_startup_from_config_creates_engine() -> None:
    engine = startup(config=DatabaseConfig(uri="sqlite+pysqlite:///:memory:", schema=None))

    assert configured_engine() is engine
    assert engine.dialect.name == "sqlite"
    assert configured_schema() is None


def test_startup_keeps_configured_schema() -> None:
    startup(config=DatabaseConfig(uri="sqlite+pysqlite:///:memory:", schema="main"))

    assert configured_schema() == "main"


def test_shutdown_resets_state() -> None:
    startup(engine=create_engine("sqlite+pysqlite:///:memory:", future=True))

    shutdown()

    assert not is_started()
    assert configured_schema() is None
