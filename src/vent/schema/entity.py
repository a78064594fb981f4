"""Lazy edge loading on top of a single entity.

Prefer eager loading through ``GetOptions(with_edges=...)``. EntityWithEdges
is for code that receives an entity and only later learns which edges it
needs, such as a hook or a custom view.
"""

import logging

from vent.core.errors import EdgeNotLoadedError, SchemaConfigError
from vent.core.fields import EntityData, FieldType
from vent.schema.client import GetOptions
from vent.schema.config import SchemaConfig

logger = logging.getLogger(__name__)


class EntityWithEdges:
    """An entity, its schema and a request-local cache of loaded edges.

    Edges are looked up in this order: the wrapper's own cache, data that
    was eager-loaded into the entity, and (``load_edge`` only) the schema's
    client. The cache lives as long as the wrapper; nothing is shared
    between instances.

    Example:
        post = EntityWithEdges(entity, registry.get("Post"))
        tags = await post.load_edge("tags")
    """

    def __init__(self, entity: EntityData, schema: SchemaConfig):
        self.entity = entity
        self.schema = schema
        self._loaded: dict[str, list[EntityData]] = {}

    def __repr__(self) -> str:
        return f"EntityWithEdges({self.schema.name} #{self.entity.id}, loaded={sorted(self._loaded)})"

    @property
    def id(self) -> int:
        return self.entity.id

    def _check_edge(self, name: str) -> None:
        if self.schema.get_edge(name) is None:
            raise SchemaConfigError(f"Schema '{self.schema.name}' has no edge '{name}'")

    @staticmethod
    def _eager(entity: EntityData, name: str) -> list[EntityData] | None:
        value = entity.get(name)
        if value is None:
            return None
        if value.type is FieldType.RELATION:
            return value.relation_entities() if value.is_relation_loaded() else None
        if value.type is FieldType.FOREIGN_KEY and value.relation is not None:
            related = value.relation.entity
            return [related] if related is not None else None
        return None

    async def load_edge(self, name: str) -> list[EntityData]:
        """Return the related entities of an edge, fetching them if needed.

        Raises:
            SchemaConfigError: If the schema declares no such edge
            EntityNotFoundError: If the entity no longer exists
        """
        self._check_edge(name)
        if name in self._loaded:
            return self._loaded[name]

        edges = self._eager(self.entity, name)
        if edges is None:
            logger.debug("Lazy loading %s.%s for id %d", self.schema.name, name, self.entity.id)
            fetched = await self.schema.client.get(self.entity.id, GetOptions(with_edges=[name]))
            # a null foreign key comes back absent
            edges = self._eager(fetched, name) or []

        self._loaded[name] = edges
        return edges

    def get_loaded_edge(self, name: str) -> list[EntityData]:
        """Return an edge that is already loaded, without touching storage.

        Raises:
            SchemaConfigError: If the schema declares no such edge
            EdgeNotLoadedError: If the edge is neither cached nor eager-loaded
        """
        self._check_edge(name)
        if name in self._loaded:
            return self._loaded[name]
        edges = self._eager(self.entity, name)
        if edges is None:
            raise EdgeNotLoadedError(self.schema.name, name)
        return edges

    def is_edge_loaded(self, name: str) -> bool:
        return name in self._loaded or self._eager(self.entity, name) is not None
