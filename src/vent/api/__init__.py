"""JSON admin API."""

from vent.api.app import create_app

__all__ = ["create_app"]
