"""Configuration for the Bay Navigator safety layer."""

from .settings import Settings, settings

__all__ = ["Settings", "settings"]
