"""
Application configuration using Pydantic settings.

Re-exports from the core.config module so the backend and the CLI read the
same settings.
"""

from core.config import Settings, get_settings

__all__ = ["Settings", "get_settings"]
