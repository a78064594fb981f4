"""Schema metadata, the storage client contract and the schema registry."""

from vent.schema.client import (
    GetOptions,
    ListOptions,
    QueryOptions,
    SchemaClient,
    SelectOption,
)
from vent.schema.config import (
    EdgeType,
    FieldConfig,
    FieldSet,
    RelationDef,
    SchemaConfig,
)
from vent.schema.entity import EntityWithEdges
from vent.schema.registry import SchemaRegistry

__all__ = [
    "EdgeType",
    "EntityWithEdges",
    "FieldConfig",
    "FieldSet",
    "GetOptions",
    "ListOptions",
    "QueryOptions",
    "RelationDef",
    "SchemaClient",
    "SchemaConfig",
    "SchemaRegistry",
    "SelectOption",
]
