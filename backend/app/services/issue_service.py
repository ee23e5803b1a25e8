"""
Issue service - bridges FastAPI endpoints with the core query engine,
CSV import pipeline and IssueRepository.
"""

from sqlalchemy.orm import Session

from core.constants import VALID_SEVERITIES, VALID_STATUSES
from core.exceptions import IssueNotFoundError
from core.logging import get_logger
from core.models import Issue
from core.repositories import IssueRepository
from core.services import ImportReport, QueryParams, import_csv, query_issues

from ..schemas import IssueCreateRequest, IssueUpdateRequest

logger = get_logger("api.issue_service")


def issue_to_dict(issue: Issue) -> dict:
    """Convert an Issue model to a response dictionary."""
    return issue.to_dict()


def list_issues(db: Session, params: QueryParams) -> dict:
    """
    Run a listing query over every stored issue.

    Returns:
        ``{"data": [...], "pagination": {...}}``
    """
    repo = IssueRepository(db)
    page, pagination = query_issues(repo.list_all(), params)
    return {
        "data": [issue_to_dict(issue) for issue in page],
        "pagination": pagination.to_dict(),
    }


def get_issue(db: Session, issue_id: str) -> Issue:
    """Get a single issue by ID, raising IssueNotFoundError if not found."""
    issue = IssueRepository(db).get_by_id(issue_id)
    if issue is None:
        raise IssueNotFoundError(issue_id)
    return issue


def create_issue(db: Session, request: IssueCreateRequest) -> Issue:
    issue = IssueRepository(db).create(**request.to_fields())
    logger.info("issue_created", issue_id=issue.id, severity=issue.severity, site=issue.site)
    return issue


def update_issue(db: Session, issue_id: str, request: IssueUpdateRequest) -> Issue:
    fields = request.to_fields()
    issue = IssueRepository(db).update(issue_id, **fields)
    logger.info("issue_updated", issue_id=issue_id, fields=sorted(fields))
    return issue


def delete_issue(db: Session, issue_id: str) -> None:
    if not IssueRepository(db).delete(issue_id):
        raise IssueNotFoundError(issue_id)
    logger.info("issue_deleted", issue_id=issue_id)


def import_issues_from_csv(db: Session, raw_text: str | None) -> ImportReport:
    """
    Bulk-create issues from CSV text.

    Each row is inserted in its own SAVEPOINT so a storage failure on one row
    is reported against that row and the others still commit.
    """
    repo = IssueRepository(db)
    return import_csv(raw_text, lambda fields: repo.create_isolated(**fields))


def get_statistics(db: Session) -> dict:
    """Issue counts overall and per status / severity, zero-filled."""
    repo = IssueRepository(db)
    by_status = repo.count_by("status")
    by_severity = repo.count_by("severity")
    return {
        "total": repo.count(),
        "byStatus": {status: by_status.get(status, 0) for status in VALID_STATUSES},
        "bySeverity": {severity: by_severity.get(severity, 0) for severity in VALID_SEVERITIES},
    }
