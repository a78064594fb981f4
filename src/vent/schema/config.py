"""Static schema metadata.

A SchemaConfig is built once when a schema is registered and is only read
afterwards, so it can be shared by any number of concurrent requests.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from functools import cached_property
from typing import TYPE_CHECKING, Any

from vent.core.errors import SchemaConfigError
from vent.core.fields import FIELD_TYPES, EntityData, FieldType

if TYPE_CHECKING:
    from vent.mappers import FieldMapper
    from vent.schema.client import SchemaClient


class EdgeType(Enum):
    """Kind of a to-many relationship."""

    HAS_MANY = "has_many"
    MANY_TO_MANY = "many_to_many"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class RelationDef:
    """A relation field's target.

    Attributes:
        target_schema: Name of the related schema (e.g. "User")
        target_display: Field shown for related entities (e.g. "email")
        target_path: Admin path of the related schema (e.g. "/admin/users/")
        unique: True for to-one relations, False for to-many
    """

    target_schema: str
    target_display: str = "id"
    target_path: str = ""
    unique: bool = False


@dataclass(frozen=True)
class FieldConfig:
    """A single field of a schema.

    Attributes:
        name: Field name (e.g. "email", "author")
        label: Human-readable label (e.g. "Email")
        type: The field type
        input_type: Optional input type override (e.g. "password")
        editable: Whether the field can be written through the admin
        relation: Target of a relation field
    """

    name: str
    label: str = ""
    type: FieldType = FieldType.STRING
    input_type: str = ""
    editable: bool = True
    relation: RelationDef | None = None

    def __post_init__(self):
        if not self.label:
            object.__setattr__(self, "label", _label_from_name(self.name))
        is_relation_type = self.type in (FieldType.FOREIGN_KEY, FieldType.RELATION)
        if self.relation is not None and not is_relation_type:
            raise SchemaConfigError(
                f"Field '{self.name}' of type {self.type} can not declare a relation"
            )
        if self.relation is None and is_relation_type:
            raise SchemaConfigError(f"Relation field '{self.name}' has no relation target")

    def effective_input_type(self) -> str:
        """Input type for forms; an explicit input_type wins over the type default."""
        if self.input_type:
            return self.input_type
        return FIELD_TYPES[self.type].input_type


@dataclass(frozen=True)
class FieldSet:
    """A named group of fields rendered together in forms."""

    fields: list[str]
    label: str = ""


def _label_from_name(name: str) -> str:
    return name.replace("_", " ").strip().capitalize()


@dataclass(frozen=True)
class SchemaConfig:
    """Admin configuration of one record type.

    Attributes:
        name: Schema name (e.g. "User")
        fields: Field definitions in declaration order
        columns: Field names shown in the list view
        field_sets: Optional field groupings for forms
        client: Storage client for this schema
        display_field: Field used as an entity's label
        field_mappers: Pipeline applied to write payloads
        disable_admin: Keep the schema out of the admin routes (it can still
            be a relation target)
    """

    name: str
    fields: list[FieldConfig] = field(default_factory=list)
    columns: list[str] = field(default_factory=list)
    field_sets: list[FieldSet] = field(default_factory=list)
    client: SchemaClient | None = field(default=None, compare=False)
    display_field: str | None = None
    field_mappers: FieldMapper | None = field(default=None, compare=False)
    disable_admin: bool = False

    def __post_init__(self):
        if not self.name:
            raise SchemaConfigError("Schema name must not be empty")

        seen: set[str] = set()
        for f in self.fields:
            if f.name in seen:
                raise SchemaConfigError(f"Schema '{self.name}' declares field '{f.name}' twice")
            seen.add(f.name)

        for column in self.columns:
            if column not in seen:
                raise SchemaConfigError(
                    f"Schema '{self.name}' column '{column}' is not a declared field"
                )
        for field_set in self.field_sets:
            for name in field_set.fields:
                if name not in seen:
                    raise SchemaConfigError(
                        f"Schema '{self.name}' field set entry '{name}' is not a declared field"
                    )
        if self.display_field and self.display_field not in seen:
            raise SchemaConfigError(
                f"Schema '{self.name}' display field '{self.display_field}' is not a declared field"
            )

    @cached_property
    def _fields_by_name(self) -> dict[str, FieldConfig]:
        return {f.name: f for f in self.fields}

    @property
    def path(self) -> str:
        """List view path segment, e.g. "users/" for "User"."""
        return f"{self.name.lower()}s/"

    def entity_path(self, id: int) -> str:
        return f"{self.path}{id}/"

    @property
    def permission_suffix(self) -> str:
        return self.name.lower()

    def get_field(self, name: str) -> FieldConfig | None:
        return self._fields_by_name.get(name)

    def lookup_field(self, name: str) -> FieldConfig:
        """Return the declared field, or a read-only string stand-in."""
        declared = self._fields_by_name.get(name)
        if declared is not None:
            return declared
        return FieldConfig(name=name, editable=False)

    def get_edge(self, name: str) -> RelationDef | None:
        """Relation definition of the field called ``name``, if any."""
        declared = self._fields_by_name.get(name)
        if declared is None:
            return None
        return declared.relation

    def edge_names(self) -> list[str]:
        return [f.name for f in self.fields if f.relation is not None]

    def form_field_names(self) -> list[str]:
        """Field names for forms: field set order, else declaration order."""
        if self.field_sets:
            return [name for field_set in self.field_sets for name in field_set.fields]
        return [f.name for f in self.fields]

    def entity_display(self, entity: EntityData) -> str:
        if self.display_field:
            value = entity.get(self.display_field)
            if value is not None and value.display:
                return value.display
        return f"{self.name} #{entity.id}"

    def apply_field_mappers(self, data: dict[str, Any]) -> None:
        """Run the field mapper pipeline on ``data``; no-op without one."""
        if self.field_mappers is None:
            return
        self.field_mappers(data)
