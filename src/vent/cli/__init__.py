"""Vent command line interface."""
