"""Persistence layer - reference SchemaClient implementations."""

from vent.persistence.memory import InMemorySchemaClient, MemoryEdge

__all__ = ["InMemorySchemaClient", "MemoryEdge"]
