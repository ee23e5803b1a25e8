"""
Database session dependency for the backend.

Re-exports from the core.db module so routers and tests share one
``get_db`` object (tests override it via ``app.dependency_overrides``).

Note: Database initialization is handled explicitly in main.py startup,
NOT at import time. This prevents issues with configuration loading order
and allows proper health checking before database access.
"""

from core.db import db, get_db

__all__ = ["db", "get_db"]
