import os
import sys
from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.append(PROJECT_ROOT)

from backend.app.database import get_db  # noqa: E402
from backend.app.main import create_app  # noqa: E402


@pytest.fixture
def test_app_client(test_db) -> Iterator[tuple[TestClient, sessionmaker]]:
    db_url, TestingSessionLocal, engine = test_db

    app = create_app()

    def override_get_db() -> Iterator[Session]:
        db = TestingSessionLocal()
        try:
            yield db
            db.commit()  # Auto-commit on success like production
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as client:
        yield client, TestingSessionLocal


@pytest.fixture
def client(test_app_client) -> TestClient:
    client, _ = test_app_client
    return client


@pytest.fixture
def create_issue(client):
    """POST an issue and return its JSON representation."""

    def _create(**overrides) -> dict:
        payload = {
            "title": "Missing consent form",
            "description": "Consent form not in file for patient 003",
            "site": "Site-101",
            "severity": "major",
        }
        payload.update(overrides)
        response = client.post("/api/issues", json=payload)
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _create
