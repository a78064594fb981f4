"""Field mapper pipeline.

Field mappers transform submitted form data before it is handed to a
SchemaClient for create/update. A pipeline is built once per schema:

    from vent.mappers import chain_field_mappers, hash_password, set_default

    mappers = chain_field_mappers(
        hash_password("password", "password_hash", password_service),
        set_default("is_active", True),
    )
"""

from vent.mappers.pipeline import (
    FieldMapper,
    TransformFn,
    chain_field_mappers,
    compute_field,
    hash_password,
    map_field,
    remove_fields,
    rename_field,
    set_default,
    transform_field,
)

__all__ = [
    "FieldMapper",
    "TransformFn",
    "chain_field_mappers",
    "compute_field",
    "hash_password",
    "map_field",
    "remove_fields",
    "rename_field",
    "set_default",
    "transform_field",
]
