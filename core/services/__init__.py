"""
Core services: the issue query engine and the CSV bulk import pipeline.

Both are plain functions over their inputs; storage is handed in by the caller.
"""

from core.services.csv_import import ImportReport, RowFailure, RowSuccess, import_csv
from core.services.query_engine import PaginationInfo, QueryParams, query_issues

__all__ = [
    "QueryParams",
    "PaginationInfo",
    "query_issues",
    "ImportReport",
    "RowSuccess",
    "RowFailure",
    "import_csv",
]
