"""
Pydantic schemas for request validation.

Everything reaching core.services has passed through one of these first.
"""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, model_validator

from core.constants import TITLE_MAX_LENGTH, Severity, Status

Title = Annotated[
    str, StringConstraints(strip_whitespace=True, min_length=1, max_length=TITLE_MAX_LENGTH)
]
NonBlank = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class IssueCreateRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: Title
    description: NonBlank
    site: NonBlank
    severity: Severity
    status: Status | None = None

    def to_fields(self) -> dict:
        return {
            "title": self.title,
            "description": self.description,
            "site": self.site,
            "severity": self.severity.value,
            "status": self.status.value if self.status else None,
        }


class IssueUpdateRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: Title | None = None
    description: NonBlank | None = None
    site: NonBlank | None = None
    severity: Severity | None = None
    status: Status | None = None

    @model_validator(mode="after")
    def require_one_field(self) -> "IssueUpdateRequest":
        if not self.to_fields():
            raise ValueError(
                "At least one field must be provided for update. Received empty body"
            )
        return self

    def to_fields(self) -> dict:
        """Supplied fields only, enums as their string values."""
        fields = self.model_dump(exclude_none=True)
        return {
            key: value.value if isinstance(value, (Severity, Status)) else value
            for key, value in fields.items()
        }


class ValidationErrorDetail(BaseModel):
    type: str = "field"
    path: str
    location: str
    msg: str
    value: object | None = None


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    message: str | None = None
    details: list[ValidationErrorDetail] | None = Field(default=None)
