"""Typed field values and the per-record EntityData map.

A FieldValue is a closed, tagged value used on the read/render side.
Inbound write data stays a loose ``dict[str, Any]`` (see vent.schema.forms)
and is never mixed with FieldValues.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any

from vent.core.errors import FieldTypeError


class FieldType(Enum):
    """Type tag carried by every FieldValue."""

    STRING = "string"
    INT = "int"
    BOOL = "bool"
    TIME = "time"
    FOREIGN_KEY = "foreign_key"
    RELATION = "relation"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class FieldTypeInfo:
    """Static facts about a field type.

    Attributes:
        raw_type: Python type the raw value must have
        input_type: Default input type for form rendering
        alignment: Column alignment in table views
    """

    raw_type: type
    input_type: str
    alignment: str = "left"


FIELD_TYPES: dict[FieldType, FieldTypeInfo] = {
    FieldType.STRING: FieldTypeInfo(raw_type=str, input_type="text"),
    FieldType.INT: FieldTypeInfo(raw_type=int, input_type="number", alignment="right"),
    FieldType.BOOL: FieldTypeInfo(raw_type=bool, input_type="checkbox"),
    FieldType.TIME: FieldTypeInfo(raw_type=datetime, input_type="datetime-local"),
    FieldType.FOREIGN_KEY: FieldTypeInfo(raw_type=int, input_type="select"),
    FieldType.RELATION: FieldTypeInfo(raw_type=tuple, input_type="select-multiple"),
}


def get_field_type(type_name: str) -> FieldType:
    """Look up a field type by its name (e.g. "string", "foreign_key").

    Raises:
        ValueError: If the name is not a known field type
    """
    try:
        return FieldType(type_name)
    except ValueError:
        known = ", ".join(t.value for t in FieldType)
        raise ValueError(f"Unknown field type '{type_name}' (expected one of: {known})")


def _raw_matches(field_type: FieldType, raw: Any) -> bool:
    expected = FIELD_TYPES[field_type].raw_type
    # bool is an int subclass; an int tag must not accept True/False
    if expected is int and isinstance(raw, bool):
        return False
    if field_type is FieldType.RELATION:
        return isinstance(raw, tuple) and all(
            isinstance(i, int) and not isinstance(i, bool) for i in raw
        )
    return isinstance(raw, expected)


@dataclass(frozen=True)
class RelationValue:
    """Payload of a to-one (foreign key) field.

    Attributes:
        target_schema: Name of the related schema (e.g. "User")
        target_id: ID of the related entity
        target_label: Display value of the related entity
        target_path: Admin path of the related schema (e.g. "/admin/users/")
        entity: The related entity, when it was eager-loaded
    """

    target_schema: str
    target_id: int
    target_label: str = ""
    target_path: str = ""
    entity: EntityData | None = None

    @property
    def url(self) -> str:
        return f"{self.target_path}{self.target_id}/"


@dataclass(frozen=True)
class RelationData:
    """Payload of a to-many relation field.

    ``loaded`` separates "present but empty" from "never fetched". Eager-load
    paths always produce ``loaded=True``.
    """

    target_schema: str
    target_path: str = ""
    entities: tuple[EntityData, ...] = ()
    loaded: bool = True

    def __post_init__(self):
        if not isinstance(self.entities, tuple):
            object.__setattr__(self, "entities", tuple(self.entities))

    @property
    def display(self) -> str:
        count = len(self.entities)
        return f"{count} item" if count == 1 else f"{count} items"


@dataclass(frozen=True)
class FieldValue:
    """A typed field value with its display string.

    Build instances with the ``from_*`` constructors; they fix the tag and
    compute ``display``. The raw value must always agree with the tag.
    """

    type: FieldType
    raw: Any
    display: str = ""
    relation: RelationValue | RelationData | None = field(default=None, compare=False)

    def __post_init__(self):
        if not _raw_matches(self.type, self.raw):
            raise FieldTypeError(
                f"vent: raw value of type {type(self.raw).__name__} "
                f"does not match field type {self.type}"
            )

    @classmethod
    def from_string(cls, value: str) -> FieldValue:
        return cls(FieldType.STRING, value, value)

    @classmethod
    def from_int(cls, value: int) -> FieldValue:
        return cls(FieldType.INT, value, str(value))

    @classmethod
    def from_bool(cls, value: bool) -> FieldValue:
        return cls(FieldType.BOOL, value, "true" if value else "false")

    @classmethod
    def from_time(cls, value: datetime) -> FieldValue:
        return cls(FieldType.TIME, value, value.isoformat())

    @classmethod
    def from_foreign_key(cls, id: int, relation: RelationValue) -> FieldValue:
        return cls(FieldType.FOREIGN_KEY, id, relation.target_label, relation)

    @classmethod
    def from_relation(cls, data: RelationData) -> FieldValue:
        ids = tuple(entity.id for entity in data.entities)
        return cls(FieldType.RELATION, ids, data.display, data)

    def __str__(self) -> str:
        return self.display

    def is_zero(self) -> bool:
        """Return True if the raw value is the zero value of its type."""
        if self.type is FieldType.TIME:
            return self.raw.replace(tzinfo=None) == datetime.min
        if self.type is FieldType.RELATION:
            return len(self.raw) == 0
        return not self.raw

    def _expect(self, *types: FieldType) -> None:
        if self.type not in types:
            wanted = types[0]
            raise FieldTypeError(
                f"vent: cannot get {wanted} value from field of type {self.type}"
            )

    def string_value(self) -> str:
        self._expect(FieldType.STRING)
        return self.raw

    def int_value(self) -> int:
        self._expect(FieldType.INT, FieldType.FOREIGN_KEY)
        return self.raw

    def bool_value(self) -> bool:
        self._expect(FieldType.BOOL)
        return self.raw

    def time_value(self) -> datetime:
        self._expect(FieldType.TIME)
        return self.raw

    def relation_entities(self) -> list[EntityData]:
        """Related entities of a RELATION field; empty for any other type."""
        if self.type is FieldType.RELATION and isinstance(self.relation, RelationData):
            return list(self.relation.entities)
        return []

    def is_relation_loaded(self) -> bool:
        return (
            self.type is FieldType.RELATION
            and isinstance(self.relation, RelationData)
            and self.relation.loaded
        )

    def to_python(self) -> Any:
        """Return the loose value used in write payloads."""
        if self.type is FieldType.RELATION:
            return list(self.raw)
        return self.raw


def field_value_from_raw(field_type: FieldType, raw: Any) -> FieldValue:
    """Build a scalar FieldValue from a stored raw value.

    Relation types need a payload and are built with
    FieldValue.from_foreign_key / FieldValue.from_relation instead.
    """
    if field_type is FieldType.STRING:
        return FieldValue.from_string(raw)
    if field_type is FieldType.INT:
        return FieldValue.from_int(raw)
    if field_type is FieldType.BOOL:
        return FieldValue.from_bool(raw)
    if field_type is FieldType.TIME:
        return FieldValue.from_time(raw)
    raise FieldTypeError(f"vent: {field_type} fields need a relation payload")


class EntityData(Mapping[str, FieldValue]):
    """One resolved record: field name (including edge names) -> FieldValue.

    Instances are read-only. Use ``with_fields`` to derive a changed copy.
    """

    __slots__ = ("_fields",)

    def __init__(self, fields: Mapping[str, FieldValue] | None = None, **kwargs: FieldValue):
        data = dict(fields or {})
        data.update(kwargs)
        for name, value in data.items():
            if not isinstance(value, FieldValue):
                raise FieldTypeError(
                    f"vent: field '{name}' must be a FieldValue, got {type(value).__name__}"
                )
        self._fields = MappingProxyType(data)

    def __getitem__(self, name: str) -> FieldValue:
        return self._fields[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        body = ", ".join(f"{k}={v.display!r}" for k, v in self._fields.items())
        return f"EntityData({body})"

    @property
    def id(self) -> int:
        """The "id" field as an int, or 0 when absent."""
        value = self._fields.get("id")
        if value is None:
            return 0
        return value.int_value()

    def with_fields(self, **fields: FieldValue) -> EntityData:
        return EntityData(self._fields, **fields)

    def get_string(self, name: str) -> str:
        value = self._fields.get(name)
        if value is not None and value.type is FieldType.STRING:
            return value.raw
        return ""

    def get_int(self, name: str) -> int:
        value = self._fields.get(name)
        if value is not None and value.type in (FieldType.INT, FieldType.FOREIGN_KEY):
            return value.raw
        return 0

    def get_bool(self, name: str) -> bool:
        value = self._fields.get(name)
        if value is not None and value.type is FieldType.BOOL:
            return value.raw
        return False

    def get_time(self, name: str) -> datetime:
        value = self._fields.get(name)
        if value is not None and value.type is FieldType.TIME:
            return value.raw
        return datetime.min

    def get_edges(self, name: str) -> list[EntityData] | None:
        """Related entities of an eager-loaded edge, or None if not loaded."""
        value = self._fields.get(name)
        if value is not None and value.is_relation_loaded():
            return value.relation_entities()
        return None

    def has_edge(self, name: str) -> bool:
        """True if the edge was loaded, even when it has no entities."""
        value = self._fields.get(name)
        return value is not None and value.is_relation_loaded()

    def to_dict(self) -> dict[str, str]:
        """Display strings keyed by field name, for JSON responses."""
        return {name: value.display for name, value in self._fields.items()}
