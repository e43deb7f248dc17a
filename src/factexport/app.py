"""Application orchestration entry points."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from factexport.adapters.sqlalchemy import SqlAlchemyFactStore, shutdown, startup
from factexport.config import get_database_config
from factexport.domain.export import ExportPipeline, build_formatter

if TYPE_CHECKING:
    from factexport.config import DatabaseConfig, ExportConfig
    from factexport.domain.export import ExportResult
    from factexport.domain.ports import FactStore, OutputSink

log = getLogger(__name__)


def export_facts(
    *,
    export_config: ExportConfig,
    sink: OutputSink,
    store: FactStore | None = None,
    database_config: DatabaseConfig | None = None,
) -> ExportResult:
    """Export every fact in the store to ``sink`` using the configured adapters.

    When no ``store`` is given, a SQLAlchemy engine is started for the database
    configuration and disposed of once the run ends, successful or not.
    """

    owns_engine = store is None
    if store is None:
        effective_config = database_config or get_database_config()
        log.info("Using database %s", effective_config.describe())
        startup(config=effective_config, force=True)
        store = SqlAlchemyFactStore()

    pipeline = ExportPipeline(
        store=store,
        formatter=build_formatter(export_config.format),
        sink=sink,
        batch_size=export_config.batch_size,
    )
    try:
        return pipeline.run()
    finally:
        if owns_engine:
            shutdown()
