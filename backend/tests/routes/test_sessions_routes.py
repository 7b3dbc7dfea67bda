from datetime import timedelta

from swimdesk.core.ulid_helper import generate_ulid
from swimdesk.utils.time_utils import utc_now


def _session_body(**overrides):
    starts_at = (utc_now() + timedelta(days=7)).replace(microsecond=0)
    body = {
        "class_id": generate_ulid(),
        "class_title": "Parent & Tot",
        "instructor_id": generate_ulid(),
        "starts_at": starts_at.isoformat(),
        "ends_at": (starts_at + timedelta(minutes=30)).isoformat(),
        "capacity": 6,
    }
    body.update(overrides)
    return body


class TestSessionRoutes:
    def test_staff_creates_weekly_series(self, client, admin_headers):
        starts_at = (utc_now() + timedelta(days=1)).replace(microsecond=0)
        body = _session_body(
            starts_at=starts_at.isoformat(),
            ends_at=(starts_at + timedelta(minutes=45)).isoformat(),
            recurrence={"frequency": "weekly", "until": (starts_at + timedelta(weeks=2)).date().isoformat()},
        )

        response = client.post("/api/v1/sessions", json=body, headers=admin_headers)

        assert response.status_code == 201
        assert response.json()["total"] == 3
        assert len({s["series_id"] for s in response.json()["sessions"]}) == 1

    def test_naive_datetimes_are_rejected(self, client, admin_headers):
        starts_at = (utc_now() + timedelta(days=1)).replace(tzinfo=None, microsecond=0)
        body = _session_body(
            starts_at=starts_at.isoformat(),
            ends_at=(starts_at + timedelta(minutes=30)).isoformat(),
        )

        response = client.post("/api/v1/sessions", json=body, headers=admin_headers)

        assert response.status_code == 422

    def test_too_short_session_is_rejected(self, client, admin_headers):
        starts_at = utc_now() + timedelta(days=1)
        body = _session_body(
            starts_at=starts_at.isoformat(),
            ends_at=(starts_at + timedelta(minutes=5)).isoformat(),
        )

        assert client.post("/api/v1/sessions", json=body, headers=admin_headers).status_code == 422

    def test_client_cannot_create_sessions(self, client, client_headers):
        assert client.post("/api/v1/sessions", json=_session_body(), headers=client_headers).status_code == 403

    def test_list_and_get(self, client, class_session, client_headers):
        listing = client.get("/api/v1/sessions", headers=client_headers)
        detail = client.get(f"/api/v1/sessions/{class_session.id}", headers=client_headers)

        assert [s["id"] for s in listing.json()["sessions"]] == [class_session.id]
        assert detail.status_code == 200
        assert detail.json()["starts_at"].endswith(("Z", "+00:00"))

    def test_get_from_other_business_is_404(self, client, class_session, auth_headers, other_business_id):
        from swimdesk.core.enums import RoleName

        headers = auth_headers(generate_ulid(), RoleName.CLIENT, other_business_id)

        response = client.get(f"/api/v1/sessions/{class_session.id}", headers=headers)

        assert response.status_code == 404
        assert response.json()["code"] == "SESSION_NOT_FOUND"

    def test_malformed_session_id_is_422(self, client, client_headers):
        assert client.get("/api/v1/sessions/not-a-ulid", headers=client_headers).status_code == 422

    def test_deactivate_and_roster(self, client, class_session, client_headers, admin_headers, client_id):
        client.post(f"/api/v1/sessions/{class_session.id}/enroll", headers=client_headers)

        roster = client.get(f"/api/v1/sessions/{class_session.id}/roster", headers=admin_headers).json()
        deactivated = client.post(f"/api/v1/sessions/{class_session.id}/deactivate", headers=admin_headers)

        assert roster["active_count"] == 1
        assert roster["enrollments"][0]["client_id"] == client_id
        assert deactivated.json()["is_active"] is False


class TestEnrollmentRoutes:
    def test_duplicate_enrollment_is_409(self, client, class_session, client_headers):
        client.post(f"/api/v1/sessions/{class_session.id}/enroll", headers=client_headers)

        response = client.post(f"/api/v1/sessions/{class_session.id}/enroll", headers=client_headers)

        assert response.status_code == 409
        assert response.json()["code"] == "DUPLICATE_ENROLLMENT"

    def test_full_session_is_409(self, client, make_session, client_headers, other_client_headers):
        session = make_session(capacity=1)
        client.post(f"/api/v1/sessions/{session.id}/enroll", headers=other_client_headers)

        response = client.post(f"/api/v1/sessions/{session.id}/enroll", headers=client_headers)

        assert response.status_code == 409
        assert response.json()["code"] == "CAPACITY_EXCEEDED"
        assert response.json()["detail"] == "This session is full"

    def test_client_cannot_act_for_another_client(self, client, class_session, client_headers, other_client_id):
        response = client.post(
            f"/api/v1/sessions/{class_session.id}/enroll",
            json={"client_id": other_client_id},
            headers=client_headers,
        )

        assert response.status_code == 403
        assert response.json()["code"] == "FORBIDDEN_CLIENT"

    def test_staff_must_name_the_client(self, client, class_session, admin_headers):
        response = client.post(f"/api/v1/sessions/{class_session.id}/enroll", headers=admin_headers)

        assert response.status_code == 400
        assert response.json()["code"] == "CLIENT_REQUIRED"

    def test_staff_cancels_for_client(self, client, class_session, admin_headers, client_id, staff_id):
        client.post(
            f"/api/v1/sessions/{class_session.id}/enroll", json={"client_id": client_id}, headers=admin_headers
        )

        response = client.post(
            f"/api/v1/sessions/{class_session.id}/cancel", json={"client_id": client_id}, headers=admin_headers
        )

        assert response.status_code == 200
        assert response.json()["cancellation_event"]["client_id"] == client_id

    def test_cancel_without_enrollment_is_404(self, client, class_session, client_headers):
        response = client.post(f"/api/v1/sessions/{class_session.id}/cancel", headers=client_headers)

        assert response.status_code == 404
        assert response.json()["code"] == "ENROLLMENT_NOT_FOUND"
