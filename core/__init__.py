"""
Trial Issue Tracker Core Library.

This package provides the core functionality for the tracker: database
management, the Issue model, the issue repository, the query engine, the CSV
import pipeline, configuration and logging.

Usage:
    # Database
    from core.db import db, get_db
    from core.models import Issue
    from core.repositories import IssueRepository

    # Query / import
    from core.services import QueryParams, query_issues, import_csv

    # Config
    from core.config import get_settings, Settings

    # Logging
    from core.logging import get_logger, configure_logging
"""

__version__ = "1.0.0"

# Lazy imports to avoid circular dependencies
# Users should import directly from submodules:
#   from core.db import db
#   from core.config import get_settings
#   from core.logging import get_logger
