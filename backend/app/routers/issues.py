"""
Issue listing, CRUD, statistics and CSV upload endpoints.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, File, Query, Response, UploadFile, status
from sqlalchemy.orm import Session

from core.config import get_settings
from core.constants import (
    DEFAULT_PAGE,
    Severity,
    SortField,
    SortOrder,
    Status,
)
from core.exceptions import InvalidUploadError
from core.services import QueryParams

from ..database import get_db
from ..schemas import ErrorResponse, IssueCreateRequest, IssueUpdateRequest
from ..services import issue_service

router = APIRouter(prefix="/issues", tags=["issues"])

settings = get_settings()

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Validation failed"},
    404: {"model": ErrorResponse, "description": "Issue not found"},
}

CSV_CONTENT_TYPES = ("text/csv", "application/csv", "application/vnd.ms-excel")


# =============================================================================
# List & Query Endpoints
# =============================================================================


@router.get("", responses=ERROR_RESPONSES)
def list_issues(
    page: int = Query(DEFAULT_PAGE, ge=1, description="1-based page number"),
    page_size: int = Query(
        settings.default_page_size,
        ge=1,
        le=settings.max_page_size,
        alias="pageSize",
        description="Results per page",
    ),
    search: str | None = Query(None, description="Case-insensitive title search"),
    status_filter: Status | None = Query(None, alias="status", description="Filter by status"),
    severity: Severity | None = Query(None, description="Filter by severity"),
    sort_by: SortField = Query(SortField.CREATED_AT, alias="sortBy", description="Sort field"),
    sort_order: SortOrder = Query(SortOrder.DESC, alias="sortOrder", description="Sort direction"),
    db: Session = Depends(get_db),
):
    """List issues with search, filtering, sorting and pagination."""
    params = QueryParams(
        page=page,
        page_size=page_size,
        search=search.strip() if search and search.strip() else None,
        status=status_filter.value if status_filter else None,
        severity=severity.value if severity else None,
        sort_by=sort_by.value,
        sort_order=sort_order.value,
    )
    return {"success": True, "data": issue_service.list_issues(db, params)}


@router.get("/stats")
def get_issue_statistics(db: Session = Depends(get_db)):
    """Issue counts by status and severity."""
    return {"success": True, "data": issue_service.get_statistics(db)}


# =============================================================================
# Bulk Import
# =============================================================================


def _read_upload(upload: UploadFile | None) -> str | None:
    """Decode an uploaded CSV, rejecting non-CSV or oversized files."""
    if upload is None:
        return None

    filename = (upload.filename or "").lower()
    if upload.content_type not in CSV_CONTENT_TYPES and not filename.endswith(".csv"):
        raise InvalidUploadError()

    content = upload.file.read()
    if len(content) > settings.max_upload_size_bytes:
        raise InvalidUploadError(
            f"File exceeds the {settings.max_upload_size_mb}MB upload limit"
        )

    try:
        return content.decode("utf-8")
    except UnicodeDecodeError:
        raise InvalidUploadError("CSV file must be UTF-8 encoded") from None


@router.post("/upload", responses=ERROR_RESPONSES)
def upload_issues_from_csv(
    csv_file: UploadFile | None = File(None, alias="csv"),
    db: Session = Depends(get_db),
):
    """
    Bulk-create issues from a CSV upload (multipart field ``csv``).

    Rows are validated independently; the response lists which rows were
    created and why the others failed.
    """
    raw_text = _read_upload(csv_file)
    report = issue_service.import_issues_from_csv(db, raw_text)
    return {"success": True, "data": report.to_dict(issue_service.issue_to_dict)}


# =============================================================================
# CRUD Endpoints
# =============================================================================


@router.post("", status_code=status.HTTP_201_CREATED, responses=ERROR_RESPONSES)
def create_issue(request: IssueCreateRequest, db: Session = Depends(get_db)):
    """Create an issue. Status defaults to open."""
    issue = issue_service.create_issue(db, request)
    return {"success": True, "data": issue_service.issue_to_dict(issue)}


@router.get("/{issue_id}", responses=ERROR_RESPONSES)
def get_issue(issue_id: UUID, db: Session = Depends(get_db)):
    """Get a single issue."""
    issue = issue_service.get_issue(db, str(issue_id))
    return {"success": True, "data": issue_service.issue_to_dict(issue)}


@router.put("/{issue_id}", responses=ERROR_RESPONSES)
def update_issue(issue_id: UUID, request: IssueUpdateRequest, db: Session = Depends(get_db)):
    """Partially update an issue; only supplied fields change."""
    issue = issue_service.update_issue(db, str(issue_id), request)
    return {"success": True, "data": issue_service.issue_to_dict(issue)}


@router.delete("/{issue_id}", status_code=status.HTTP_204_NO_CONTENT, responses=ERROR_RESPONSES)
def delete_issue(issue_id: UUID, db: Session = Depends(get_db)):
    """Delete an issue permanently."""
    issue_service.delete_issue(db, str(issue_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
