"""
Repository pattern implementations for data access.

Usage:
    from core.repositories import IssueRepository
    from core.db import db

    with db.session() as session:
        repo = IssueRepository(session)
        issues = repo.list_all()
"""

from .base import BaseRepository
from .issue_repository import IssueRepository

__all__ = [
    "BaseRepository",
    "IssueRepository",
]
