"""Utility functions for Google Photos Picker."""

from .auth import TokenProvider, load_credentials

__all__ = ["TokenProvider", "load_credentials"]
