"""
Pytest fixtures for Trial Issue Tracker tests.

Every test gets its own in-memory SQLite database built through the same
DatabaseManager the API and CLI use.
"""

import os

# Settings are read on first import of the app; keep tests off any real database
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("CREATE_TABLES_ON_STARTUP", "true")

from datetime import datetime, timedelta, timezone  # noqa: E402

import pytest  # noqa: E402

from core.db import DatabaseManager  # noqa: E402
from core.models import Issue  # noqa: E402

BASE_TIME = datetime(2025, 5, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture(scope="function")
def test_db():
    """Create a fresh in-memory database for each test."""
    db_url = "sqlite://"
    manager = DatabaseManager()
    manager.initialize(db_url)
    manager.create_all_tables()

    yield db_url, manager.SessionLocal, manager.engine

    manager.reset()


@pytest.fixture
def test_session(test_db):
    """Get a test session from the test database."""
    _, TestingSessionLocal, _ = test_db
    session = TestingSessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def make_issue(
    title="Missing consent form",
    description="Consent form not in file for patient 003",
    site="Site-101",
    severity="major",
    status="open",
    created_at=None,
    **kwargs,
) -> Issue:
    """Build an unsaved Issue with sensible defaults."""
    created_at = created_at or BASE_TIME
    return Issue(
        title=title,
        description=description,
        site=site,
        severity=severity,
        status=status,
        created_at=created_at,
        updated_at=kwargs.pop("updated_at", created_at),
        **kwargs,
    )


@pytest.fixture
def issue_factory():
    """Factory for unsaved issues, see make_issue."""
    return make_issue


@pytest.fixture
def sample_issues():
    """
    The eight seeded trial issues, one hour apart, oldest first.

    Not persisted; the query engine only needs the objects.
    """
    rows = [
        ("Missing consent form", "Site-101", "major", "open"),
        ("Temperature log incomplete", "Site-102", "minor", "in_progress"),
        ("Protocol deviation", "Site-101", "critical", "open"),
        ("Equipment calibration overdue", "Site-103", "major", "resolved"),
        ("Documentation error", "Site-102", "minor", "open"),
        ("Sample storage issue", "Site-101", "critical", "in_progress"),
        ("Missing lab results", "Site-103", "major", "open"),
        ("IRB approval pending", "Site-102", "major", "in_progress"),
    ]
    return [
        make_issue(
            id=f"00000000-0000-4000-8000-00000000000{i}",
            title=title,
            description=f"{title} at {site}",
            site=site,
            severity=severity,
            status=status,
            created_at=BASE_TIME + timedelta(hours=i),
        )
        for i, (title, site, severity, status) in enumerate(rows)
    ]


@pytest.fixture
def persisted_issues(test_session, sample_issues):
    """The sample issues saved to the test database."""
    test_session.add_all(sample_issues)
    test_session.commit()
    return sample_issues
