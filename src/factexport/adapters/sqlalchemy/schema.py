"""Pydantic models describing the JSON document stored in ``fact.data``."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictFloat, StrictInt, StrictStr

from factexport.domain.model import PredecessorReference

if TYPE_CHECKING:
    from factexport.domain.model import DeclaredRole, FieldValue


class FactDataBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)


class PredecessorPayload(FactDataBaseModel):
    hash: str
    type: str

    def to_reference(self) -> PredecessorReference:
        return PredecessorReference(content_hash=self.hash, fact_type=self.type)


class FactDataPayload(FactDataBaseModel):
    # strict types keep "1" from turning into 1 and 1 into True
    fields: dict[
        str,
        StrictStr | StrictBool | StrictInt | StrictFloat | None | list[object] | dict[str, object],
    ] = Field(default_factory=dict)
    predecessors: dict[str, PredecessorPayload | list[PredecessorPayload]] = Field(
        default_factory=dict
    )

    def declared_predecessors(self) -> dict[str, DeclaredRole]:
        declared: dict[str, DeclaredRole] = {}
        for role, value in self.predecessors.items():
            if isinstance(value, PredecessorPayload):
                declared[role] = value.to_reference()
            else:
                declared[role] = tuple(item.to_reference() for item in value)
        return declared

    def field_values(self) -> dict[str, FieldValue]:
        # nested values pass through untouched; the formatter rejects them
        return dict(self.fields)  # pyright: ignore[reportReturnType]
