"""SchemaClient Protocol: the narrow storage contract Vent depends on."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from vent.core.fields import EntityData

if TYPE_CHECKING:
    from vent.schema.config import RelationDef


@dataclass
class QueryOptions:
    """Options for listing entities.

    Attributes:
        order_by: Field name to order by
        order_desc: True for descending order
        limit: Maximum number of results (0 = no limit)
        offset: Number of results to skip
        filters: Equality filters, field name -> value
        with_edges: Edge paths to eager-load (e.g. ["groups__permissions"])
    """

    order_by: str = ""
    order_desc: bool = False
    limit: int = 0
    offset: int = 0
    filters: dict[str, Any] = field(default_factory=dict)
    with_edges: list[str] = field(default_factory=list)


ListOptions = QueryOptions


@dataclass
class GetOptions:
    """Options for fetching a single entity."""

    with_edges: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class SelectOption:
    """An option of a relation select input."""

    value: int
    label: str
    selected: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"value": self.value, "label": self.label, "selected": self.selected}


@runtime_checkable
class SchemaClient(Protocol):
    """CRUD operations for one schema.

    Implementations wrap a real storage layer. Edges listed in
    ``with_edges`` must be eager-loaded and attached as loaded relation
    values; edges that were not requested must be left out. Errors are
    propagated to the caller unchanged, except that a missing id raises
    vent.core.errors.EntityNotFoundError.
    """

    async def list(self, options: QueryOptions) -> list[EntityData]: ...

    async def get(self, id: int, options: GetOptions | None = None) -> EntityData: ...

    async def create(self, data: dict[str, Any]) -> EntityData: ...

    async def update(self, id: int, data: dict[str, Any]) -> None: ...

    async def delete(self, id: int) -> None: ...

    async def get_relation_options(self, relation: RelationDef) -> list[SelectOption]: ...
