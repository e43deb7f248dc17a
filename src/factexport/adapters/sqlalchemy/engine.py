"""Engine lifecycle for the SQLAlchemy fact store adapter."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from sqlalchemy import create_engine

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

    from factexport.config import DatabaseConfig

log = getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when the adapter is used before initialisation or initialised twice."""


@dataclass(slots=True)
class _AdapterState:
    engine: Engine | None = None
    schema: str | None = None


_STATE = _AdapterState()


def startup(
    *,
    engine: Engine | None = None,
    config: DatabaseConfig | None = None,
    force: bool = False,
) -> Engine:
    """Initialise the engine used by ``SqlAlchemyFactStore`` instances."""

    if _STATE.engine is not None and not force:
        raise StartupError(
            "SQLAlchemy adapter already initialised. Pass force=True to reconfigure."
        )
    if engine is None:
        if config is None:
            raise StartupError("Either an engine or a database configuration is required")
        log.debug("Creating engine for %s", config.describe())
        engine = create_engine(config.uri, future=True, pool_pre_ping=True)

    if _STATE.engine is not None and _STATE.engine is not engine:
        shutdown()
    _STATE.engine = engine
    _STATE.schema = config.schema if config is not None else None
    return engine


def configured_engine() -> Engine | None:
    """Return the engine currently managed by the adapter (if any)."""

    return _STATE.engine


def configured_schema() -> str | None:
    return _STATE.schema


def require_engine() -> Engine:
    if _STATE.engine is None:
        raise StartupError(
            "SQLAlchemy adapter not initialised. Call factexport.adapters.sqlalchemy."
            "engine.startup() before opening a fact store."
        )
    return _STATE.engine


def is_started() -> bool:
    """Return whether the adapter has been initialised."""

    return _STATE.engine is not None


def shutdown() -> None:
    """Dispose the managed engine and reset state."""

    if _STATE.engine is not None:
        _STATE.engine.dispose()
        log.info("Disconnected from database")
    _STATE.engine = None
    _STATE.schema = None
