"""
Issue SQLAlchemy model.
"""

import uuid
from datetime import datetime
from typing import Dict

from sqlalchemy import CheckConstraint, DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from core.constants import DEFAULT_STATUS, TITLE_MAX_LENGTH, VALID_SEVERITIES, VALID_STATUSES
from core.utils import format_timestamp, utcnow

from .base import Base


def _in_clause(column: str, values: tuple[str, ...]) -> str:
    quoted = ", ".join(f"'{v}'" for v in values)
    return f"{column} IN ({quoted})"


def _new_issue_id() -> str:
    return str(uuid.uuid4())


class Issue(Base):
    """
    A problem tracked against a clinical-trial site.

    Severity and status are constrained at the database level as well as by
    the request schemas, so no other value can be persisted.
    """
    __tablename__ = "issues"
    __table_args__ = (
        CheckConstraint(_in_clause("severity", VALID_SEVERITIES), name="ck_issues_severity"),
        CheckConstraint(_in_clause("status", VALID_STATUSES), name="ck_issues_status"),
        Index("ix_issues_created_at", "created_at"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_issue_id)
    title: Mapped[str] = mapped_column(String(TITLE_MAX_LENGTH))
    description: Mapped[str] = mapped_column(Text)
    site: Mapped[str] = mapped_column(String(255))
    severity: Mapped[str] = mapped_column(String(16))
    status: Mapped[str] = mapped_column(String(16), default=DEFAULT_STATUS)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    def to_dict(self) -> Dict:
        """
        Convert the issue record into the API's JSON shape.

        Keys are camelCase and timestamps are ISO 8601 UTC strings.
        """
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "site": self.site,
            "severity": self.severity,
            "status": self.status,
            "createdAt": format_timestamp(self.created_at),
            "updatedAt": format_timestamp(self.updated_at),
        }

    def __repr__(self) -> str:
        return f"<Issue {self.id} {self.severity}/{self.status} {self.title!r}>"
