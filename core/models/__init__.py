"""
SQLAlchemy models for the trial issue tracker.

Single source of truth for all database models. Used by both CLI and backend.

Usage:
    from core.models import Issue
"""

from .base import Base
from .issue import Issue

__all__ = [
    "Base",
    "Issue",
]
