"""
Application configuration using Pydantic settings.

Configuration comes from environment variables with sensible defaults.
Every external credential is optional; features degrade without them.
"""

from .settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
