"""Logging setup for the command line entry point."""

from __future__ import annotations

import logging
import sys


def configure_logging(*, level: int = logging.INFO, force: bool = False) -> None:
    """Send log records to stderr so they never mix with an export on stdout.

    Pass ``force=True`` to reconfigure, as the CLI does for ``--verbose``.
    SQLAlchemy's engine logger stays at WARNING so that SQL echo never floods
    the diagnostics.
    """

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
        force=force,
    )
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
