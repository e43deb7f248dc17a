"""Helpers for populating the fact schema in a test database."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from sqlalchemy import select

from factexport.adapters.sqlalchemy import edge_table, fact_table, fact_type_table, role_table

if TYPE_CHECKING:
    from collections.abc import Mapping

    from sqlalchemy.engine import Engine

    from factexport.domain.model import FieldValue


@dataclass(frozen=True, slots=True)
class SeededFact:
    fact_id: int
    fact_type: str
    content_hash: str

    def payload(self) -> dict[str, str]:
        return {"hash": self.content_hash, "type": self.fact_type}


type SeededRole = SeededFact | list[SeededFact]


@dataclass
class FactSeeder:
    """Insert facts together with the edges the store derives from their predecessors."""

    engine: Engine
    _type_ids: dict[str, int] = field(default_factory=dict)
    _role_ids: dict[tuple[int, str], int] = field(default_factory=dict)

    def add(
        self,
        fact_type: str,
        content_hash: str,
        *,
        fields: Mapping[str, FieldValue | object] | None = None,
        predecessors: Mapping[str, SeededRole] | None = None,
        without_edges: frozenset[str] = frozenset(),
        data: object | None = None,
    ) -> SeededFact:
        predecessors = predecessors or {}
        document = data
        if document is None:
            document = {
                "fields": dict(fields or {}),
                "predecessors": {
                    role: [item.payload() for item in value]
                    if isinstance(value, list)
                    else value.payload()
                    for role, value in predecessors.items()
                },
            }

        with self.engine.begin() as connection:
            type_id = self._fact_type_id(connection, fact_type)
            fact_id = connection.execute(
                fact_table.insert().values(fact_type_id=type_id, hash=content_hash, data=document)
            ).inserted_primary_key[0]
            for role, value in predecessors.items():
                if role in without_edges:
                    continue
                role_id = self._role_id(connection, type_id, role)
                targets = value if isinstance(value, list) else [value]
                for target in {item.fact_id for item in targets}:
                    connection.execute(
                        edge_table.insert().values(
                            role_id=role_id,
                            successor_fact_id=fact_id,
                            predecessor_fact_id=target,
                        )
                    )
        return SeededFact(fact_id=fact_id, fact_type=fact_type, content_hash=content_hash)

    def _fact_type_id(self, connection, name: str) -> int:  # noqa: ANN001
        if name not in self._type_ids:
            existing = connection.execute(
                select(fact_type_table.c.fact_type_id).where(fact_type_table.c.name == name)
            ).scalar_one_or_none()
            if existing is None:
                existing = connection.execute(
                    fact_type_table.insert().values(name=name)
                ).inserted_primary_key[0]
            self._type_ids[name] = existing
        return self._type_ids[name]

    def _role_id(self, connection, type_id: int, name: str) -> int:  # noqa: ANN001
        key = (type_id, name)
        if key not in self._role_ids:
            self._role_ids[key] = connection.execute(
                role_table.insert().values(defining_fact_type_id=type_id, name=name)
            ).inserted_primary_key[0]
        return self._role_ids[key]


def seed_blog(seeder: FactSeeder) -> tuple[SeededFact, SeededFact, SeededFact]:
    site = seeder.add("Site", "site-hash", fields={"domain": "example.com"})
    post = seeder.add(
        "Post",
        "post-hash",
        fields={"createdAt": "2023-05-20T10:30:00Z"},
        predecessors={"site": site},
    )
    title = seeder.add(
        "Title",
        "title-hash",
        fields={"value": "Hello"},
        predecessors={"post": post, "prior": []},
    )
    return site, post, title
