"""In-memory SchemaClient.

A reference implementation of the SchemaClient contract backed by plain
dicts. It is used by the test-suite and the demo server; it is not a
storage engine (filters are equality only, nothing is persisted).

Rows hold raw values. A to-one edge is stored as the target id (or None),
a to-many edge as a list of target ids.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from vent.core.edges import EdgePath, parse_edge_paths
from vent.core.errors import EntityNotFoundError
from vent.core.fields import (
    EntityData,
    FieldType,
    FieldValue,
    RelationData,
    RelationValue,
    field_value_from_raw,
)
from vent.schema.client import GetOptions, QueryOptions, SelectOption
from vent.schema.config import RelationDef

logger = logging.getLogger(__name__)


@dataclass
class MemoryEdge:
    """An edge from one in-memory client to another."""

    target: InMemorySchemaClient
    unique: bool = False
    target_path: str = ""


class InMemorySchemaClient:
    """SchemaClient storing rows in a dict keyed by id.

    Args:
        name: Schema name (used in errors and relation payloads)
        fields: Scalar field types, excluding "id"
        display_field: Field used as the label of this schema's entities
    """

    def __init__(
        self,
        name: str,
        fields: dict[str, FieldType],
        display_field: str = "id",
    ):
        for field_name, field_type in fields.items():
            if field_type in (FieldType.FOREIGN_KEY, FieldType.RELATION):
                raise ValueError(f"Declare edge '{field_name}' with add_edge()")
        self.name = name
        self.fields: dict[str, FieldType] = {"id": FieldType.INT, **fields}
        self.display_field = display_field
        self.edges: dict[str, MemoryEdge] = {}
        self._rows: dict[int, dict[str, Any]] = {}
        self._next_id = 1

    def add_edge(
        self,
        name: str,
        target: InMemorySchemaClient,
        unique: bool = False,
        target_path: str = "",
    ) -> None:
        """Declare an edge. Separate from __init__ so edges can be cyclic."""
        if name in self.fields or name in self.edges:
            raise ValueError(f"{self.name} already has a field named '{name}'")
        self.edges[name] = MemoryEdge(target=target, unique=unique, target_path=target_path)

    # --- Writes ---

    def _check_write(self, data: dict[str, Any]) -> dict[str, Any]:
        row: dict[str, Any] = {}
        for key, value in data.items():
            if key == "id":
                raise ValueError(f"{self.name}: 'id' can not be written")
            if key in self.edges:
                edge = self.edges[key]
                if edge.unique:
                    row[key] = None if value is None else int(value)
                else:
                    row[key] = [int(v) for v in value or []]
            elif key in self.fields:
                if value is not None:
                    # Raises FieldTypeError for a mistyped value
                    field_value_from_raw(self.fields[key], value)
                row[key] = value
            else:
                raise ValueError(f"{self.name} has no field '{key}'")
        return row

    def insert(self, data: dict[str, Any]) -> int:
        """Synchronously add a row and return its id. Used for seeding."""
        row = self._check_write(data)
        for name, edge in self.edges.items():
            row.setdefault(name, None if edge.unique else [])
        row["id"] = self._next_id
        self._next_id += 1
        self._rows[row["id"]] = row
        return row["id"]

    def _row(self, id: int) -> dict[str, Any]:
        try:
            return self._rows[id]
        except KeyError:
            raise EntityNotFoundError(self.name, id) from None

    # --- Reads ---

    def _label(self, row: dict[str, Any]) -> str:
        value = row.get(self.display_field)
        return "" if value is None else str(value)

    def _to_entity(self, row: dict[str, Any], edge_tree: list[EdgePath]) -> EntityData:
        requested = {node.name: node for node in edge_tree}
        for name in requested:
            if name not in self.edges:
                raise ValueError(f"{self.name} has no edge '{name}'")

        values: dict[str, FieldValue] = {}
        for name, field_type in self.fields.items():
            if row.get(name) is not None:
                values[name] = field_value_from_raw(field_type, row[name])

        for name, edge in self.edges.items():
            target = edge.target
            node = requested.get(name)
            if edge.unique:
                target_id = row.get(name)
                target_row = target._rows.get(target_id) if target_id is not None else None
                if target_row is None:
                    continue
                loaded = target._to_entity(target_row, list(node.children)) if node else None
                values[name] = FieldValue.from_foreign_key(
                    target_id,
                    RelationValue(
                        target_schema=target.name,
                        target_id=target_id,
                        target_label=target._label(target_row),
                        target_path=edge.target_path,
                        entity=loaded,
                    ),
                )
            elif node is not None:
                related = [
                    target._to_entity(target._rows[i], list(node.children))
                    for i in row.get(name) or []
                    if i in target._rows
                ]
                values[name] = FieldValue.from_relation(
                    RelationData(
                        target_schema=target.name,
                        target_path=edge.target_path,
                        entities=tuple(related),
                        loaded=True,
                    )
                )
        return EntityData(values)

    async def list(self, options: QueryOptions) -> list[EntityData]:
        rows = [
            row
            for row in self._rows.values()
            if all(row.get(k) == v for k, v in options.filters.items())
        ]
        if options.order_by:
            rows.sort(
                key=lambda r: (r.get(options.order_by) is None, r.get(options.order_by)),
                reverse=options.order_desc,
            )
        if options.offset:
            rows = rows[options.offset:]
        if options.limit:
            rows = rows[: options.limit]

        edge_tree = parse_edge_paths(options.with_edges)
        return [self._to_entity(row, edge_tree) for row in rows]

    async def get(self, id: int, options: GetOptions | None = None) -> EntityData:
        edge_tree = parse_edge_paths(options.with_edges if options else [])
        return self._to_entity(self._row(id), edge_tree)

    async def create(self, data: dict[str, Any]) -> EntityData:
        id = self.insert(data)
        logger.debug("Created %s %d", self.name, id)
        return self._to_entity(self._rows[id], [])

    async def update(self, id: int, data: dict[str, Any]) -> None:
        row = self._row(id)
        row.update(self._check_write(data))

    async def delete(self, id: int) -> None:
        self._row(id)
        del self._rows[id]

    async def get_relation_options(self, relation: RelationDef) -> list[SelectOption]:
        for edge in self.edges.values():
            if edge.target.name == relation.target_schema:
                target = edge.target
                break
        else:
            raise ValueError(f"{self.name} has no edge to '{relation.target_schema}'")

        return [
            SelectOption(
                value=id,
                label="" if row.get(relation.target_display) is None else str(row[relation.target_display]),
            )
            for id, row in sorted(target._rows.items())
        ]
