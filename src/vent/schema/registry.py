"""Schema registry.

One registry is constructed at startup and handed to whatever needs to
resolve schemas by name (the admin handler, relation option lookups).
There is no module-level registry.
"""

import logging
from collections.abc import Iterator

from vent.core.errors import SchemaConfigError, SchemaNotFoundError
from vent.schema.config import RelationDef, SchemaConfig

logger = logging.getLogger(__name__)


class SchemaRegistry:
    """Registered schemas keyed by name.

    Example:
        registry = SchemaRegistry()
        registry.register(user_schema)
        registry.get("User")
    """

    def __init__(self, schemas: list[SchemaConfig] | None = None):
        self._schemas: dict[str, SchemaConfig] = {}
        for schema in schemas or []:
            self.register(schema)

    def register(self, schema: SchemaConfig) -> SchemaConfig:
        """Register a schema.

        Raises:
            SchemaConfigError: If the name is taken or the schema has no client
        """
        if schema.name in self._schemas:
            raise SchemaConfigError(f"Schema '{schema.name}' is already registered")
        if schema.client is None:
            raise SchemaConfigError(f"Schema '{schema.name}' has no client")
        self._schemas[schema.name] = schema
        logger.debug("Registered schema %s", schema.name)
        return schema

    def get(self, name: str) -> SchemaConfig:
        """Get a schema by name.

        Raises:
            SchemaNotFoundError: If no schema has that name
        """
        try:
            return self._schemas[name]
        except KeyError:
            raise SchemaNotFoundError(name) from None

    def resolve(self, relation: RelationDef) -> SchemaConfig:
        """Return the target schema of a relation."""
        return self.get(relation.target_schema)

    def check_relations(self) -> None:
        """Verify every relation points at a registered schema.

        Raises:
            SchemaConfigError: On the first dangling relation
        """
        for schema in self._schemas.values():
            for name in schema.edge_names():
                target = schema.get_edge(name).target_schema
                if target not in self._schemas:
                    raise SchemaConfigError(
                        f"Schema '{schema.name}' field '{name}' targets "
                        f"unregistered schema '{target}'"
                    )

    def __contains__(self, name: object) -> bool:
        return name in self._schemas

    def __iter__(self) -> Iterator[SchemaConfig]:
        """Iterate schemas sorted by name."""
        return iter(sorted(self._schemas.values(), key=lambda s: s.name))

    def __len__(self) -> int:
        return len(self._schemas)

    def names(self) -> list[str]:
        return sorted(self._schemas)
