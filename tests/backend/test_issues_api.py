"""
Tests for issue CRUD endpoints, statistics, health checks and the error envelope.
"""

import re
import uuid

ISO_UTC = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z$")
MISSING_ID = "8f14e45f-ceea-467f-a0e6-0a5d3c7b2f11"


class TestCreateIssue:
    def test_create_returns_201_with_defaults(self, client):
        response = client.post(
            "/api/issues",
            json={
                "title": "Missing consent form",
                "description": "Consent form not in file for patient 003",
                "site": "Site-101",
                "severity": "major",
            },
        )

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        issue = body["data"]
        assert uuid.UUID(issue["id"]).version == 4
        assert issue["status"] == "open"
        assert issue["severity"] == "major"
        assert ISO_UTC.match(issue["createdAt"])
        assert ISO_UTC.match(issue["updatedAt"])

    def test_create_with_status(self, create_issue):
        issue = create_issue(status="in_progress")
        assert issue["status"] == "in_progress"

    def test_fields_are_trimmed(self, create_issue):
        issue = create_issue(title="  Documentation error  ", site=" Site-102 ")
        assert issue["title"] == "Documentation error"
        assert issue["site"] == "Site-102"

    def test_missing_fields_fail_validation(self, client):
        response = client.post("/api/issues", json={"title": "Only a title"})

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "Validation failed"
        paths = {detail["path"] for detail in body["details"]}
        assert paths == {"description", "site", "severity"}
        assert all(detail["location"] == "body" for detail in body["details"])
        assert all(detail["type"] == "field" for detail in body["details"])

    def test_invalid_severity(self, client):
        response = client.post(
            "/api/issues",
            json={"title": "T", "description": "D", "site": "S", "severity": "urgent"},
        )
        assert response.status_code == 400
        detail = response.json()["details"][0]
        assert detail["path"] == "severity"
        assert detail["value"] == "urgent"

    def test_invalid_status(self, client):
        response = client.post(
            "/api/issues",
            json={"title": "T", "description": "D", "site": "S", "severity": "minor", "status": "closed"},
        )
        assert response.status_code == 400

    def test_blank_title_rejected(self, client):
        response = client.post(
            "/api/issues",
            json={"title": "   ", "description": "D", "site": "S", "severity": "minor"},
        )
        assert response.status_code == 400
        assert response.json()["details"][0]["path"] == "title"

    def test_title_too_long(self, client):
        response = client.post(
            "/api/issues",
            json={"title": "x" * 256, "description": "D", "site": "S", "severity": "minor"},
        )
        assert response.status_code == 400


class TestGetIssue:
    def test_get_existing(self, client, create_issue):
        created = create_issue()

        response = client.get(f"/api/issues/{created['id']}")

        assert response.status_code == 200
        assert response.json() == {"success": True, "data": created}

    def test_get_missing_returns_404(self, client):
        response = client.get(f"/api/issues/{MISSING_ID}")

        assert response.status_code == 404
        assert response.json() == {"success": False, "error": "Issue not found"}

    def test_malformed_id_is_validation_error(self, client):
        response = client.get("/api/issues/not-a-uuid")

        assert response.status_code == 400
        detail = response.json()["details"][0]
        assert detail["location"] == "path"
        assert detail["path"] == "issue_id"


class TestUpdateIssue:
    def test_partial_update(self, client, create_issue):
        created = create_issue()

        response = client.put(f"/api/issues/{created['id']}", json={"status": "resolved"})

        assert response.status_code == 200
        updated = response.json()["data"]
        assert updated["status"] == "resolved"
        assert updated["title"] == created["title"]
        assert updated["severity"] == created["severity"]
        assert updated["createdAt"] == created["createdAt"]
        assert updated["updatedAt"] >= created["updatedAt"]

    def test_update_persists(self, client, create_issue):
        created = create_issue()
        client.put(f"/api/issues/{created['id']}", json={"severity": "critical", "title": "Escalated"})

        fetched = client.get(f"/api/issues/{created['id']}").json()["data"]
        assert fetched["severity"] == "critical"
        assert fetched["title"] == "Escalated"

    def test_empty_body_rejected(self, client, create_issue):
        created = create_issue()

        response = client.put(f"/api/issues/{created['id']}", json={})

        assert response.status_code == 400
        detail = response.json()["details"][0]
        assert "At least one field must be provided for update" in detail["msg"]

    def test_unknown_fields_only_counts_as_empty(self, client, create_issue):
        created = create_issue()
        response = client.put(f"/api/issues/{created['id']}", json={"priority": "high"})
        assert response.status_code == 400

    def test_invalid_severity(self, client, create_issue):
        created = create_issue()
        response = client.put(f"/api/issues/{created['id']}", json={"severity": "blocker"})
        assert response.status_code == 400

    def test_update_missing_returns_404(self, client):
        response = client.put(f"/api/issues/{MISSING_ID}", json={"status": "resolved"})
        assert response.status_code == 404
        assert response.json()["error"] == "Issue not found"


class TestDeleteIssue:
    def test_delete(self, client, create_issue):
        created = create_issue()

        response = client.delete(f"/api/issues/{created['id']}")

        assert response.status_code == 204
        assert response.content == b""
        assert client.get(f"/api/issues/{created['id']}").status_code == 404

    def test_delete_missing_returns_404(self, client):
        response = client.delete(f"/api/issues/{MISSING_ID}")
        assert response.status_code == 404


class TestStatistics:
    def test_empty_store_is_zero_filled(self, client):
        response = client.get("/api/issues/stats")

        assert response.status_code == 200
        assert response.json()["data"] == {
            "total": 0,
            "byStatus": {"open": 0, "in_progress": 0, "resolved": 0},
            "bySeverity": {"minor": 0, "major": 0, "critical": 0},
        }

    def test_counts(self, client, persisted_issues):
        data = client.get("/api/issues/stats").json()["data"]

        assert data["total"] == 8
        assert data["byStatus"] == {"open": 4, "in_progress": 3, "resolved": 1}
        assert data["bySeverity"] == {"minor": 2, "major": 4, "critical": 2}


class TestInfrastructure:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_readiness(self, client):
        response = client.get("/health/ready")
        assert response.status_code == 200
        assert response.json()["checks"]["database"] is True

    def test_request_id_is_generated(self, client):
        response = client.get("/health")
        assert uuid.UUID(response.headers["x-request-id"])

    def test_request_id_is_echoed(self, client):
        response = client.get("/health", headers={"X-Request-ID": "trial-req-42"})
        assert response.headers["x-request-id"] == "trial-req-42"

    def test_unsafe_request_id_is_replaced(self, client):
        response = client.get("/health", headers={"X-Request-ID": "bad id with spaces"})
        assert response.headers["x-request-id"] != "bad id with spaces"

    def test_unknown_route_uses_error_envelope(self, client):
        response = client.get("/api/nothing-here")
        assert response.status_code == 404
        assert response.json() == {"success": False, "error": "Not Found"}
