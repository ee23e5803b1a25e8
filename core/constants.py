"""
Domain constants for the trial issue tracker.

Single source of truth for the enumerated values an issue can carry.
"""

from enum import Enum


class Severity(str, Enum):
    """Issue severity."""
    MINOR = "minor"
    MAJOR = "major"
    CRITICAL = "critical"


class Status(str, Enum):
    """Issue workflow status."""
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"


class SortField(str, Enum):
    """Fields an issue listing can be ordered by."""
    CREATED_AT = "createdAt"
    STATUS = "status"
    SEVERITY = "severity"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


VALID_SEVERITIES = tuple(s.value for s in Severity)
VALID_STATUSES = tuple(s.value for s in Status)

DEFAULT_STATUS = Status.OPEN.value

# Sort rank, not alphabetical: critical > major > minor
SEVERITY_RANK = {
    Severity.CRITICAL.value: 3,
    Severity.MAJOR.value: 2,
    Severity.MINOR.value: 1,
}

# Severities missing from SEVERITY_RANK sort below minor
UNRANKED_SEVERITY = 0

TITLE_MAX_LENGTH = 255

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

# Columns recognised in bulk-import CSV files
CSV_COLUMNS = ("title", "description", "site", "severity", "status", "createdAt")


__all__ = [
    "Severity",
    "Status",
    "SortField",
    "SortOrder",
    "VALID_SEVERITIES",
    "VALID_STATUSES",
    "DEFAULT_STATUS",
    "SEVERITY_RANK",
    "UNRANKED_SEVERITY",
    "TITLE_MAX_LENGTH",
    "DEFAULT_PAGE",
    "DEFAULT_PAGE_SIZE",
    "MAX_PAGE_SIZE",
    "CSV_COLUMNS",
]
