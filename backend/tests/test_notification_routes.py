"""Tests for notification inbox routes."""

from datetime import datetime, timedelta, timezone

import pytest

from resilinked.notifications import Notification

WORKER = "usr_TEST_ONLY_worker"
T0 = datetime(2025, 3, 1, tzinfo=timezone.utc)


@pytest.fixture
def seeded(inbox):
    """Three notifications for the worker (one read), one for someone else."""
    items = [
        Notification(recipient=WORKER, type="job_match", message="New job", created_at=T0),
        Notification(
            recipient=WORKER,
            type="job_accepted",
            message="You got it",
            created_at=T0 + timedelta(minutes=1),
        ),
        Notification(
            recipient=WORKER,
            type="job_match",
            message="Old news",
            is_read=True,
            created_at=T0 + timedelta(minutes=2),
        ),
        Notification(
            recipient="usr_TEST_ONLY_helper",
            type="job_match",
            message="Not yours",
            created_at=T0 + timedelta(minutes=3),
        ),
    ]
    for n in items:
        inbox.send(n)
    return items


class TestListNotifications:
    def test_list_own_notifications(self, client, auth_headers, seeded):
        response = client.get("/api/notifications", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert [n["message"] for n in data["data"]] == ["Old news", "You got it", "New job"]
        assert data["meta"]["total"] == 3
        assert data["meta"]["unread_count"] == 2
        assert data["meta"]["pagination"] == {"page": 1, "limit": 10, "total_pages": 1}
        assert data["alert"] == "You have 2 unread notifications"

    def test_filters(self, client, auth_headers, seeded):
        response = client.get(
            "/api/notifications?type=job_match&is_read=false", headers=auth_headers
        )

        data = response.json()
        assert [n["message"] for n in data["data"]] == ["New job"]
        assert data["meta"]["total"] == 1

    def test_invalid_type(self, client, auth_headers):
        response = client.get("/api/notifications?type=spam", headers=auth_headers)
        assert response.status_code == 422

    def test_empty_inbox(self, client, auth_headers):
        data = client.get("/api/notifications", headers=auth_headers).json()
        assert data["data"] == []
        assert data["alert"] == "No new notifications"


class TestUpdateNotifications:
    def test_mark_read(self, client, auth_headers, seeded):
        target = seeded[0]

        response = client.patch(f"/api/notifications/{target.id}/read", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["notification"]["is_read"] is True

        again = client.patch(f"/api/notifications/{target.id}/read", headers=auth_headers)
        assert again.status_code == 404

    def test_cannot_mark_someone_elses(self, client, auth_headers, seeded):
        response = client.patch(f"/api/notifications/{seeded[3].id}/read", headers=auth_headers)
        assert response.status_code == 404

    def test_mark_all_read(self, client, auth_headers, seeded):
        response = client.patch("/api/notifications/read-all", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["updated_count"] == 2

        data = client.get("/api/notifications", headers=auth_headers).json()
        assert data["meta"]["unread_count"] == 0

    def test_delete(self, client, auth_headers, seeded, inbox):
        response = client.delete(f"/api/notifications/{seeded[1].id}", headers=auth_headers)

        assert response.status_code == 200
        assert seeded[1].id not in {n.id for n in inbox.sent}

        missing = client.delete(f"/api/notifications/{seeded[1].id}", headers=auth_headers)
        assert missing.status_code == 404
        assert missing.json()["alert"] == "Notification not found or already deleted"


class TestNotificationsFromJobEvents:
    def test_apply_lands_in_employer_inbox(self, client, auth_headers, employer_headers):
        job = client.post(
            "/api/jobs",
            json={"title": "Fix fence", "price": 200, "barangay": "Poblacion"},
            headers=employer_headers,
        ).json()["job"]
        client.post(f"/api/jobs/{job['id']}/apply", headers=auth_headers)

        data = client.get("/api/notifications?type=job_applied", headers=employer_headers).json()

        assert len(data["data"]) == 1
        assert data["data"][0]["related_job"] == job["id"]
