"""Typed entity values, edge paths and the error taxonomy."""
