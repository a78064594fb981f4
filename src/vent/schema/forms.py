"""Conversion of submitted form data into write payloads.

Submitted data is a loose ``dict[str, Any]`` (JSON body of a create/update
request). Each field type has exactly one conversion into the value the
storage client expects; the result then runs through the schema's field
mapper pipeline.
"""

from datetime import datetime
from typing import Any

from vent.core.errors import FormDataError
from vent.core.fields import FieldType
from vent.schema.config import FieldConfig, SchemaConfig

_TRUE_STRINGS = {"true", "on", "1", "yes"}
_FALSE_STRINGS = {"false", "off", "0", "no", ""}


def _to_int(name: str, value: Any, expected: str = "an integer") -> int:
    if isinstance(value, bool):
        raise FormDataError(name, f"expected {expected}, got bool")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            raise FormDataError(name, f"expected {expected}") from None
    raise FormDataError(name, f"expected {expected}, got {type(value).__name__}")


def _to_id(name: str, value: Any) -> int:
    return _to_int(name, value, "an id")


def coerce_input(field: FieldConfig, value: Any) -> Any:
    """Convert one submitted value to the write value for its field type.

    Raises:
        FormDataError: If the value can not be converted
    """
    name = field.name

    if field.type is FieldType.STRING:
        if isinstance(value, str):
            return value
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        raise FormDataError(name, f"expected string, got {type(value).__name__}")

    if field.type is FieldType.INT:
        return _to_int(name, value)

    if field.type is FieldType.BOOL:
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.lower() in _TRUE_STRINGS | _FALSE_STRINGS:
            return value.lower() in _TRUE_STRINGS
        raise FormDataError(name, "expected a boolean")

    if field.type is FieldType.TIME:
        if isinstance(value, datetime):
            return value
        if isinstance(value, str):
            try:
                return datetime.fromisoformat(value)
            except ValueError:
                raise FormDataError(name, "expected an ISO 8601 timestamp") from None
        raise FormDataError(name, f"expected timestamp, got {type(value).__name__}")

    if field.type is FieldType.FOREIGN_KEY:
        if value is None or value == "":
            return None
        return _to_id(name, value)

    if field.type is FieldType.RELATION:
        if value is None:
            return []
        if not isinstance(value, (list, tuple)):
            raise FormDataError(name, "expected a list of ids")
        return [_to_id(name, item) for item in value]

    raise FormDataError(name, f"unsupported field type {field.type}")


def parse_entity_form_data(schema: SchemaConfig, submitted: dict[str, Any]) -> dict[str, Any]:
    """Build a write payload for ``schema`` from submitted data.

    Only editable fields are kept; unknown keys are dropped. The schema's
    field mappers run last.

    Raises:
        FormDataError: If a value can not be converted
        FieldMapperError: If a field mapper fails
    """
    data: dict[str, Any] = {}
    for field in schema.fields:
        if not field.editable or field.name not in submitted:
            continue
        data[field.name] = coerce_input(field, submitted[field.name])

    schema.apply_field_mappers(data)
    return data
