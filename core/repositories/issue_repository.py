"""
Issue repository: the storage collaborator for the query engine and CSV import.
"""

from datetime import datetime

from sqlalchemy import func, select

from core.constants import DEFAULT_STATUS
from core.exceptions import IssueNotFoundError
from core.models import Issue
from core.utils import ensure_utc, utcnow

from .base import BaseRepository

# Fields a caller may change after creation
UPDATABLE_FIELDS = ("title", "description", "site", "severity", "status")


class IssueRepository(BaseRepository[Issue]):
    """
    Repository for Issue records.

    Filtering, sorting and pagination are not pushed down: callers take the
    ``list_all()`` scan and hand it to the query engine.
    """

    model = Issue

    def create(  # type: ignore[override]
        self,
        title: str,
        description: str,
        site: str,
        severity: str,
        status: str | None = None,
        created_at: datetime | None = None,
    ) -> Issue:
        """
        Create an issue.

        ``status`` defaults to open. ``created_at`` is only supplied by bulk
        import; ``updated_at`` never precedes it.
        """
        now = utcnow()
        created = ensure_utc(created_at) if created_at else now
        return super().create(
            title=title,
            description=description,
            site=site,
            severity=severity,
            status=status or DEFAULT_STATUS,
            created_at=created,
            updated_at=max(now, created),
        )

    def create_isolated(self, **fields) -> Issue:
        """
        Create an issue inside a SAVEPOINT.

        A storage failure rolls back this insert only, leaving earlier rows of
        the same session intact.
        """
        with self.session.begin_nested():
            return self.create(**fields)

    def update(self, id: str, **fields) -> Issue:
        """
        Apply a partial update.

        Only supplied (non-None) fields change; ``updated_at`` is always refreshed.

        Raises:
            IssueNotFoundError: If no issue has this id.
        """
        issue = self.get_by_id(id)
        if issue is None:
            raise IssueNotFoundError(id)

        for key, value in fields.items():
            if key not in UPDATABLE_FIELDS:
                raise ValueError(f"Field cannot be updated: {key}")
            if value is not None:
                setattr(issue, key, value)

        issue.updated_at = max(utcnow(), ensure_utc(issue.created_at))
        self.session.flush()
        return issue

    def count_by(self, column: str) -> dict[str, int]:
        """Count issues grouped by a column, e.g. ``count_by("status")``."""
        if column not in ("status", "severity", "site"):
            raise ValueError(f"Cannot group issues by {column}")
        attr = getattr(Issue, column)
        rows = self.session.execute(select(attr, func.count()).group_by(attr)).all()
        return {value: count for value, count in rows}
