"""
CSV bulk import.

Parses an uploaded CSV, validates each row on its own and creates the valid
ones through a caller-supplied ``create_fn``. A bad row never stops the rest
of the file: every row ends up as either a ``RowSuccess`` or a ``RowFailure``
in the returned ``ImportReport``.

Only two conditions abort the whole import before any row is touched: no
input at all, and input without data rows.
"""

import csv
import io
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Union

from core.constants import TITLE_MAX_LENGTH, VALID_SEVERITIES, VALID_STATUSES
from core.exceptions import CsvImportError, EmptyCsvError, NoFileUploadedError
from core.logging import import_logger, log_timing
from core.models import Issue
from core.utils import parse_iso_date

# The header is row 1, so the first data row is row 2
FIRST_DATA_ROW = 2

MISSING_FIELDS_ERROR = "Missing required fields"

CreateFn = Callable[[dict[str, Any]], Issue]


@dataclass
class RowSuccess:
    row: int
    issue: Issue


@dataclass
class RowFailure:
    row: int
    error: str
    data: dict[str, str]

    def to_dict(self) -> dict[str, Any]:
        return {"row": self.row, "error": self.error, "data": self.data}


RowResult = Union[RowSuccess, RowFailure]


@dataclass
class ImportReport:
    """Outcome of one bulk import, rows kept in file order."""

    total: int
    successes: list[RowSuccess] = field(default_factory=list)
    failures: list[RowFailure] = field(default_factory=list)

    @property
    def created(self) -> int:
        return len(self.successes)

    @property
    def failed(self) -> int:
        return len(self.failures)

    @property
    def issues(self) -> list[Issue]:
        return [success.issue for success in self.successes]

    @property
    def errors(self) -> list[RowFailure]:
        return list(self.failures)

    def add(self, result: RowResult) -> None:
        if isinstance(result, RowSuccess):
            self.successes.append(result)
        else:
            self.failures.append(result)

    def to_dict(self, serialize_issue: Callable[[Issue], dict] = Issue.to_dict) -> dict[str, Any]:
        return {
            "total": self.total,
            "created": self.created,
            "failed": self.failed,
            "issues": [serialize_issue(issue) for issue in self.issues],
            "errors": [failure.to_dict() for failure in self.failures],
        }


def _is_empty_line(line: list[str]) -> bool:
    return not line or (len(line) == 1 and not line[0].strip())


def parse_csv_rows(raw_text: str) -> list[dict[str, str]]:
    """
    Parse CSV text into one dict per data row, keyed by the header.

    Lenient on purpose: values are trimmed, empty lines skipped, short rows
    simply lack the trailing keys and surplus cells are dropped. Stray quotes
    inside unquoted cells are kept as literal characters.

    A line of bare delimiters such as ",,," is still a record: it fails
    validation and keeps its row number.
    """
    text = raw_text.lstrip("\ufeff").replace("\x00", "")
    reader = csv.reader(io.StringIO(text), skipinitialspace=True, strict=False)

    try:
        lines = [line for line in reader if not _is_empty_line(line)]
    except csv.Error as e:
        raise CsvImportError("Invalid CSV", str(e)) from e

    if not lines:
        return []

    header = [name.strip() for name in lines[0]]
    rows = []
    for line in lines[1:]:
        rows.append(
            {name: cell.strip() for name, cell in zip(header, line) if name}
        )
    return rows


def _validate_row(data: dict[str, str]) -> tuple[dict[str, Any] | None, str | None]:
    """
    Validate one parsed row.

    Returns:
        (fields for create_fn, None) on success or (None, error message).
    """
    title = data.get("title") or ""
    description = data.get("description") or ""
    site = data.get("site") or ""
    severity = data.get("severity") or ""
    status = data.get("status") or ""
    created_at_raw = data.get("createdAt") or ""

    if not (title and description and site and severity):
        return None, MISSING_FIELDS_ERROR

    if len(title) > TITLE_MAX_LENGTH:
        return None, f"Title too long: must be at most {TITLE_MAX_LENGTH} characters"

    if severity not in VALID_SEVERITIES:
        return None, f"Invalid severity: {severity}. Must be minor, major, or critical"

    if status and status not in VALID_STATUSES:
        return None, f"Invalid status: {status}. Must be open, in_progress, or resolved"

    created_at: datetime | None = None
    if created_at_raw:
        created_at = parse_iso_date(created_at_raw)
        if created_at is None:
            return None, f"Invalid createdAt date: {created_at_raw}. Must be a valid ISO date string"

    return {
        "title": title,
        "description": description,
        "site": site,
        "severity": severity,
        "status": status or None,
        "created_at": created_at,
    }, None


def process_row(row_number: int, data: dict[str, str], create_fn: CreateFn) -> RowResult:
    """Validate and create a single row, turning every failure into a RowFailure."""
    fields, error = _validate_row(data)
    if error is not None:
        return RowFailure(row=row_number, error=error, data=data)

    try:
        issue = create_fn(fields)
    except Exception as e:
        import_logger.warning(
            "csv_row_create_failed",
            row=row_number,
            error=str(e),
            error_type=type(e).__name__,
        )
        return RowFailure(row=row_number, error=str(e) or "Unknown error", data=data)

    return RowSuccess(row=row_number, issue=issue)


def iter_row_results(rows: list[dict[str, str]], create_fn: CreateFn) -> Iterator[RowResult]:
    """Process rows strictly in order; row N finishes before row N+1 starts."""
    for index, data in enumerate(rows):
        yield process_row(index + FIRST_DATA_ROW, data, create_fn)


@log_timing("csv_import")
def import_csv(raw_text: str | None, create_fn: CreateFn) -> ImportReport:
    """
    Import issues from CSV text.

    Args:
        raw_text: Decoded CSV file contents, or None when nothing was uploaded.
        create_fn: Storage callback receiving the validated fields
            (title, description, site, severity, status, created_at).

    Returns:
        ImportReport with per-row successes and failures.

    Raises:
        NoFileUploadedError: raw_text is None.
        EmptyCsvError: the input has no data rows.
    """
    if raw_text is None:
        raise NoFileUploadedError()

    rows = parse_csv_rows(raw_text)
    if not rows:
        raise EmptyCsvError()

    report = ImportReport(total=len(rows))
    for result in iter_row_results(rows, create_fn):
        if isinstance(result, RowFailure):
            import_logger.info("csv_row_failed", row=result.row, error=result.error)
        report.add(result)

    import_logger.info(
        "csv_import_completed",
        total=report.total,
        created=report.created,
        failed=report.failed,
    )
    return report


__all__ = [
    "RowSuccess",
    "RowFailure",
    "RowResult",
    "ImportReport",
    "parse_csv_rows",
    "process_row",
    "iter_row_results",
    "import_csv",
]
