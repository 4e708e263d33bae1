"""Configuration module for KV-Server."""

from .settings import Settings, settings

__all__ = ["Settings", "settings"]
