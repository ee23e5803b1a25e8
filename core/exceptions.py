"""Domain exceptions raised by the tracker core."""


class TrackerError(Exception):
    """Base class for tracker errors that carry a client-facing message."""

    status_code = 400

    def __init__(self, error: str, message: str | None = None):
        self.error = error
        self.message = message
        super().__init__(error)


class IssueNotFoundError(TrackerError):
    """Raised when an issue id does not exist in storage."""

    status_code = 404

    def __init__(self, issue_id: str | None = None):
        self.issue_id = issue_id
        super().__init__("Issue not found")


class CsvImportError(TrackerError):
    """Raised when a bulk import cannot start; no rows have been processed."""


class NoFileUploadedError(CsvImportError):
    def __init__(self):
        super().__init__("No file uploaded", "Please upload a CSV file")


class EmptyCsvError(CsvImportError):
    def __init__(self):
        super().__init__("Empty CSV", "The CSV file contains no data")


class InvalidUploadError(CsvImportError):
    """Raised when the uploaded file is not an acceptable CSV."""

    def __init__(self, message: str = "Only CSV files are allowed"):
        super().__init__("Invalid file", message)


__all__ = [
    "TrackerError",
    "IssueNotFoundError",
    "CsvImportError",
    "NoFileUploadedError",
    "EmptyCsvError",
    "InvalidUploadError",
]
