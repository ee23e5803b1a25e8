"""
Issue query engine.

Filters, sorts and paginates an in-memory scan of issues:

1. search   - case-insensitive substring of the title
2. status   - exact match
3. severity - exact match
4. sort     - createdAt by instant, status alphabetically, severity by rank
5. paginate - ceiling page count, out-of-range pages are empty

The engine is pure: it never touches storage and never mutates its input.
Parameters are assumed to be validated already (see backend.app.schemas).
"""

import math
from collections.abc import Callable, Sequence
from dataclasses import asdict, dataclass
from typing import Any

from core.constants import (
    DEFAULT_PAGE,
    DEFAULT_PAGE_SIZE,
    SEVERITY_RANK,
    UNRANKED_SEVERITY,
    SortField,
    SortOrder,
)
from core.logging import query_logger
from core.models import Issue
from core.utils import ensure_utc


@dataclass(frozen=True)
class QueryParams:
    """Validated listing parameters."""

    page: int = DEFAULT_PAGE
    page_size: int = DEFAULT_PAGE_SIZE
    search: str | None = None
    status: str | None = None
    severity: str | None = None
    sort_by: str = SortField.CREATED_AT.value
    sort_order: str = SortOrder.DESC.value


@dataclass(frozen=True)
class PaginationInfo:
    page: int
    page_size: int
    total: int
    total_pages: int

    def to_dict(self) -> dict[str, int]:
        return {
            "page": self.page,
            "pageSize": self.page_size,
            "total": self.total,
            "totalPages": self.total_pages,
        }


def severity_rank(severity: str) -> int:
    """Sort rank of a severity; unknown values rank below minor."""
    return SEVERITY_RANK.get(severity, UNRANKED_SEVERITY)


_SORT_KEYS: dict[str, Callable[[Issue], Any]] = {
    SortField.CREATED_AT.value: lambda issue: ensure_utc(issue.created_at),
    SortField.STATUS.value: lambda issue: issue.status,
    SortField.SEVERITY.value: lambda issue: severity_rank(issue.severity),
}


def filter_issues(issues: Sequence[Issue], params: QueryParams) -> list[Issue]:
    """Apply the search, status and severity filters in that order."""
    result = list(issues)

    if params.search:
        needle = params.search.lower()
        result = [issue for issue in result if needle in issue.title.lower()]

    if params.status:
        result = [issue for issue in result if issue.status == params.status]

    if params.severity:
        result = [issue for issue in result if issue.severity == params.severity]

    return result


def sort_issues(issues: Sequence[Issue], sort_by: str, sort_order: str) -> list[Issue]:
    """Return a new list ordered by ``sort_by``; ties keep their input order."""
    try:
        key = _SORT_KEYS[sort_by]
    except KeyError:
        raise ValueError(f"Unsupported sort field: {sort_by}") from None
    return sorted(issues, key=key, reverse=sort_order == SortOrder.DESC.value)


def paginate(issues: Sequence[Issue], page: int, page_size: int) -> tuple[list[Issue], PaginationInfo]:
    total = len(issues)
    offset = (page - 1) * page_size
    pagination = PaginationInfo(
        page=page,
        page_size=page_size,
        total=total,
        total_pages=math.ceil(total / page_size),
    )
    return list(issues[offset:offset + page_size]), pagination


def query_issues(
    all_issues: Sequence[Issue], params: QueryParams
) -> tuple[list[Issue], PaginationInfo]:
    """
    Filter, sort and paginate a full scan of issues.

    Args:
        all_issues: Every issue in storage.
        params: Validated query parameters.

    Returns:
        Tuple of (issues on the requested page, pagination metadata). ``total``
        counts matches before pagination.
    """
    matched = filter_issues(all_issues, params)
    ordered = sort_issues(matched, params.sort_by, params.sort_order)
    page, pagination = paginate(ordered, params.page, params.page_size)

    query_logger.debug(
        "issues_queried",
        scanned=len(all_issues),
        **{k: v for k, v in asdict(params).items() if v is not None},
        total=pagination.total,
        returned=len(page),
    )
    return page, pagination


__all__ = [
    "QueryParams",
    "PaginationInfo",
    "severity_rank",
    "filter_issues",
    "sort_issues",
    "paginate",
    "query_issues",
]
