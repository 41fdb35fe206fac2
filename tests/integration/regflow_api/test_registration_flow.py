"""Integration tests for the full registration flow over HTTP."""

import tempfile
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from regflow.api.app import create_app
from regflow.config import Settings
from regflow.store import RecordStore


@pytest.fixture
def temp_db_path() -> str:
    """Create a temporary database path."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        return f.name


@pytest.fixture
def client(temp_db_path: str, seed):
    """Create a test client over a seeded temporary database."""
    store = RecordStore(temp_db_path)
    seed(store)
    store.close()

    app = create_app(Settings(db_path=temp_db_path, retry_backoff_seconds=0))
    with TestClient(app, raise_server_exceptions=False) as client:
        yield client
    # Cleanup
    Path(temp_db_path).unlink(missing_ok=True)
    Path(f"{temp_db_path}-wal").unlink(missing_ok=True)
    Path(f"{temp_db_path}-shm").unlink(missing_ok=True)


@pytest.mark.integration
class TestRegistrationFlow:
    """Draft, submit, review and enrollment through the public API."""

    def test_draft_submit_approve_flow(self, client: TestClient, valid_selection) -> None:
        """Draft -> edit -> submit -> approve."""
        # 1. Save an incomplete draft
        draft = client.post(
            "/api/v1/students/stu-1/registrations", json={"course_ids": ["c-cs201"]}
        )
        assert draft.status_code == 201
        rid = draft.json()["data"]["id"]

        # 2. Submitting it fails validation and keeps it a draft
        rejected = client.post(f"/api/v1/registrations/{rid}/submit")
        assert rejected.status_code == 422
        assert rejected.json()["details"] == [
            "Minimum credit load not met. Required: 15, Selected: 4"
        ]

        # 3. Complete the selection and submit
        client.put(f"/api/v1/registrations/{rid}/courses", json={"course_ids": valid_selection})
        submitted = client.post(f"/api/v1/registrations/{rid}/submit")
        assert submitted.status_code == 200
        assert submitted.json()["data"]["registration"]["status"] == "pending"

        # 4. Administrator sees it and approves
        pending = client.get("/api/v1/admin/registrations/pending").json()["data"]
        assert [r["id"] for r in pending] == [rid]
        approved = client.post(f"/api/v1/admin/registrations/{rid}/approve")
        assert approved.status_code == 200

        # 5. Enrollment and student record reflect the approval
        art = client.get("/api/v1/courses/c-art101").json()["data"]
        assert art["enrolled"] == 1
        student = client.get("/api/v1/students/stu-1").json()["data"]
        assert student["current_registrations"] == valid_selection
        registration = client.get(f"/api/v1/registrations/{rid}").json()["data"]
        assert registration["status"] == "approved"
        assert registration["total_credits"] == 16

    def test_reject_then_resubmit(self, client: TestClient, valid_selection) -> None:
        first = client.post("/api/v1/students/stu-1/submit", json={"course_ids": valid_selection})
        first_id = first.json()["data"]["registration"]["id"]
        client.post(f"/api/v1/admin/registrations/{first_id}/reject")

        second = client.post("/api/v1/students/stu-1/submit", json={"course_ids": valid_selection})

        assert second.status_code == 201
        assert second.json()["data"]["registration"]["id"] != first_id

    def test_last_seat_goes_to_one_student(self, client: TestClient, valid_selection) -> None:
        ids = []
        for student_id in ("stu-1", "stu-2"):
            response = client.post(
                f"/api/v1/students/{student_id}/submit", json={"course_ids": valid_selection}
            )
            ids.append(response.json()["data"]["registration"]["id"])

        results = [client.post(f"/api/v1/admin/registrations/{rid}/approve") for rid in ids]

        assert [r.status_code for r in results] == [200, 409]
        art = client.get("/api/v1/courses/c-art101").json()["data"]
        assert art["enrolled"] == art["capacity"] == 1
