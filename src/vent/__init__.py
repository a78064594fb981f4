"""Vent: schema-driven admin engine."""

__version__ = "0.1.0"
