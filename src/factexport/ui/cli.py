from __future__ import annotations

import argparse
import contextlib
import logging
import os
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from factexport.app import export_facts
from factexport.config import (
    ConfigurationError,
    ConnectionParameters,
    configure_logging,
    get_database_config,
    get_export_config,
)
from factexport.domain.export import ExportError, SinkFailure
from factexport.domain.model import OutputFormat

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence
    from types import FrameType

    from factexport.domain.ports import OutputSink

log = logging.getLogger(__name__)

EXIT_INTERRUPTED = 130


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="factexport",
        description="Export a fact graph from a relational store as JSON or factual text",
    )
    connection = parser.add_argument_group("connection")
    connection.add_argument("--host", type=str, help="Database host (defaults to $PGHOST)")
    connection.add_argument("--port", type=str, help="Database port (defaults to $PGPORT or 5432)")
    connection.add_argument(
        "--database",
        type=str,
        help="Database name (defaults to $PGDATABASE)",
    )
    connection.add_argument("--user", type=str, help="Database user (defaults to $PGUSER)")
    connection.add_argument(
        "--password",
        type=str,
        help="Database password (defaults to $PGPASSWORD)",
    )
    connection.add_argument(
        "--database-uri",
        type=str,
        help="Full SQLAlchemy URI; overrides the individual connection options",
    )
    connection.add_argument(
        "--schema",
        type=str,
        help="Schema holding the fact tables (default: public on PostgreSQL)",
    )

    parser.add_argument(
        "--format",
        required=True,
        choices=[member.value for member in OutputFormat],
        help="Output format",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=None,
        help="Number of facts to read per batch (defaults to config)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="-",
        help="File to write the export to (default: stdout)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log every dropped fact and pipeline transition",
    )
    return parser.parse_args(list(argv))


@contextlib.contextmanager
def _open_sink(path: str) -> Iterator[OutputSink]:
    if path == "-":
        yield sys.stdout.buffer
        return
    with open(path, "wb") as handle:  # noqa: PTH123
        yield handle


def _silence_stdout() -> None:
    # the reader closed the pipe; keep the exit-time flush from raising BrokenPipeError
    devnull = os.open(os.devnull, os.O_WRONLY)
    os.dup2(devnull, sys.stdout.fileno())


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        if parsed_args.verbose:
            configure_logging(level=logging.DEBUG, force=True)
        export_config = get_export_config(
            output_format=parsed_args.format,
            batch_size=parsed_args.batch_size,
        )
        database_config = get_database_config(
            uri=parsed_args.database_uri,
            parameters=ConnectionParameters(
                host=parsed_args.host,
                port=parsed_args.port,
                database=parsed_args.database,
                user=parsed_args.user,
                password=parsed_args.password,
            ),
            schema=parsed_args.schema,
        )
    except (ValueError, ConfigurationError):
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        with _open_sink(parsed_args.output) as sink:
            export_facts(
                export_config=export_config,
                sink=sink,
                database_config=database_config,
            )
    except SinkFailure as exc:
        log.error("Export failed: %s", exc)  # noqa: TRY400
        if parsed_args.output == "-":
            _silence_stdout()
        sys.exit(1)
    except ExportError as exc:
        log.error("Export failed: %s", exc)  # noqa: TRY400
        sys.exit(1)
    except Exception:
        log.exception("Fatal error during export")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) by unwinding the export, which closes the cursor."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(EXIT_INTERRUPTED)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
