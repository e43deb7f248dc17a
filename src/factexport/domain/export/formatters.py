"""Wire renderers for resolved facts.

Each formatter is a strategy chosen once per run. ``header`` and ``footer``
frame the stream; ``render`` turns one fact into bytes given its position in
the emitted sequence, so that separators never need to be buffered.
"""

from __future__ import annotations

import json
import math
from typing import TYPE_CHECKING, ClassVar, Protocol, runtime_checkable

from factexport.domain.model import OutputFormat, ResolvedPredecessor

from .errors import FormatterError

if TYPE_CHECKING:
    from collections.abc import Mapping

    from factexport.domain.model import FieldValue, ResolvedFact, ResolvedRole

ENCODING = "utf-8"
FACTUAL_INDENT = "    "
JSON_INDENT = 2


@runtime_checkable
class OutputFormatter(Protocol):
    format: ClassVar[OutputFormat]

    def header(self) -> bytes: ...

    def render(self, fact: ResolvedFact, index: int) -> bytes: ...

    def footer(self, count: int) -> bytes: ...


def _check_field_value(fact: ResolvedFact, name: str, value: object) -> FieldValue:
    if value is None or isinstance(value, (str, bool, int)):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            raise FormatterError(
                f"Field {name!r} of f{fact.surrogate_id} ({fact.fact_type}) is not finite: {value}"
            )
        return value
    raise FormatterError(
        f"Field {name!r} of f{fact.surrogate_id} ({fact.fact_type}) has unsupported "
        f"value type {type(value).__name__}"
    )


def _checked_fields(fact: ResolvedFact) -> Mapping[str, FieldValue]:
    return {name: _check_field_value(fact, name, value) for name, value in fact.fields.items()}


def _json_literal(value: FieldValue) -> str:
    return json.dumps(value, ensure_ascii=False, allow_nan=False)


class JsonFormatter:
    """Streams facts as one JSON array without any surrogate ids.

    The complete stream is byte-identical to ``json.dumps(facts, indent=2)``
    followed by a newline.
    """

    format: ClassVar[OutputFormat] = OutputFormat.JSON

    def header(self) -> bytes:
        return b"["

    def render(self, fact: ResolvedFact, index: int) -> bytes:
        document = {
            "hash": fact.content_hash,
            "type": fact.fact_type,
            "predecessors": {
                role: self._predecessor_document(value)
                for role, value in fact.predecessors.items()
            },
            "fields": dict(_checked_fields(fact)),
        }
        try:
            encoded = json.dumps(
                document, indent=JSON_INDENT, ensure_ascii=False, allow_nan=False
            )
        except (TypeError, ValueError) as exc:
            raise FormatterError(f"Cannot encode f{fact.surrogate_id}: {exc}") from exc
        separator = "\n" if index == 0 else ",\n"
        # string values never contain a raw "\n", so only structural lines are indented
        indented = " " * JSON_INDENT + encoded.replace("\n", "\n" + " " * JSON_INDENT)
        return (separator + indented).encode(ENCODING)

    def footer(self, count: int) -> bytes:
        return b"\n]\n" if count else b"]\n"

    @staticmethod
    def _predecessor_document(value: ResolvedRole) -> dict[str, str] | list[dict[str, str]]:
        if isinstance(value, ResolvedPredecessor):
            return {"hash": value.content_hash, "type": value.fact_type}
        return [{"hash": item.content_hash, "type": item.fact_type} for item in value]


class FactualFormatter:
    """Renders facts as ``let`` declarations that reference predecessors by label."""

    format: ClassVar[OutputFormat] = OutputFormat.FACTUAL

    def header(self) -> bytes:
        return b""

    def render(self, fact: ResolvedFact, index: int) -> bytes:
        _ = index
        entries = [
            f"{FACTUAL_INDENT}{name}: {_json_literal(value)}"
            for name, value in _checked_fields(fact).items()
        ]
        entries.extend(
            f"{FACTUAL_INDENT}{role}: {self._reference(value)}"
            for role, value in fact.predecessors.items()
        )
        body = ",\n".join(entries)
        lines = f"let {self.label(fact.surrogate_id)}: {fact.fact_type} = {{\n"
        if body:
            lines += body + "\n"
        lines += "}\n\n"
        return lines.encode(ENCODING)

    def footer(self, count: int) -> bytes:
        _ = count
        return b""

    @staticmethod
    def label(surrogate_id: int) -> str:
        return f"f{surrogate_id}"

    def _reference(self, value: ResolvedRole) -> str:
        if isinstance(value, ResolvedPredecessor):
            return self.label(value.surrogate_id)
        return "[" + ", ".join(self.label(item.surrogate_id) for item in value) + "]"


_FORMATTERS: dict[OutputFormat, type[JsonFormatter | FactualFormatter]] = {
    OutputFormat.JSON: JsonFormatter,
    OutputFormat.FACTUAL: FactualFormatter,
}


def build_formatter(output_format: OutputFormat) -> OutputFormatter:
    """Return the formatter for ``output_format``."""

    try:
        formatter_cls = _FORMATTERS[output_format]
    except KeyError as exc:
        raise ValueError(f"Unsupported output format: {output_format}") from exc
    return formatter_cls()


if TYPE_CHECKING:
    _json_check: OutputFormatter = JsonFormatter()
    _factual_check: OutputFormatter = FactualFormatter()
