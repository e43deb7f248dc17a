"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class OutputFormat(StrEnum):
    """Wire representation selected once per export run."""

    JSON = "json"
    FACTUAL = "factual"


class PipelineState(StrEnum):
    IDLE = "idle"
    STREAMING = "streaming"
    DRAINING = "draining"
    CLOSED = "closed"
    ERRORED = "errored"
