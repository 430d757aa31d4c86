"""
Integration tests for Events API endpoints.

Tests end-to-end flows for event management:
- Listing events with status filtering
- Getting event details by GUID
- Creating, updating, cancelling and deleting events (admin)
- Registering for events (student) and the rejection bodies
- Removing participants (admin)
- Authentication and role checks
"""

import pytest


def event_payload(**overrides):
    """Valid creation payload relative to FIXED_NOW (2026-03-01)."""
    payload = {
        "title": "Annual Tech Fest",
        "description": "Talks, demos and a hackathon.",
        "event_date": "2026-03-20",
        "time": "10:00 AM",
        "location": "Main Auditorium",
        "max_participants": 2,
        "registration_deadline": "2026-03-15",
    }
    payload.update(overrides)
    return payload


class TestEventsAPIRead:
    """Public read endpoints."""

    def test_list_events_empty(self, test_client):
        response = test_client.get("/api/events")
        assert response.status_code == 200
        assert response.json() == {"count": 0, "events": []}

    def test_list_events(self, test_client, sample_event):
        sample_event(title="Later", days_ahead=9)
        sample_event(title="Sooner", days_ahead=2, participants=1, max_participants=5)

        response = test_client.get("/api/events")
        assert response.status_code == 200

        data = response.json()
        assert data["count"] == 2
        event = data["events"][0]
        assert event["title"] == "Sooner"
        assert event["guid"].startswith("evt_")
        assert event["status"] == "upcoming"
        assert event["participant_count"] == 1
        assert event["spots_left"] == 4
        assert event["registration_open"] is True
        assert "participants" not in event

    def test_list_events_status_filter(self, test_client, sample_event):
        sample_event(title="Past", days_ahead=-2)
        sample_event(title="Future", days_ahead=2)

        response = test_client.get("/api/events", params={"status": "completed"})
        assert response.status_code == 200
        assert [e["title"] for e in response.json()["events"]] == ["Past"]

    def test_list_events_invalid_status(self, test_client):
        response = test_client.get("/api/events", params={"status": "archived"})
        assert response.status_code == 422

    def test_get_event(self, test_client, sample_event):
        event = sample_event(days_ahead=0)
        response = test_client.get(f"/api/events/{event.guid}")

        assert response.status_code == 200
        data = response.json()
        assert data["guid"] == event.guid
        assert data["status"] == "ongoing"
        assert data["registration_open"] is False

    def test_get_event_not_found(self, test_client):
        response = test_client.get("/api/events/evt_01hgw2bbg00000000000000001")
        assert response.status_code == 404

    def test_get_event_invalid_guid(self, test_client):
        response = test_client.get("/api/events/not-a-guid")
        assert response.status_code == 404


class TestEventsAPIAdmin:
    """Admin write endpoints."""

    def test_create_event(self, test_client, admin_headers):
        response = test_client.post("/api/events", json=event_payload(), headers=admin_headers)

        assert response.status_code == 201
        data = response.json()
        assert data["guid"].startswith("evt_")
        assert data["status"] == "upcoming"
        assert data["participants"] == []
        assert data["spots_left"] == 2
        assert data["created_at"].endswith("Z")

    def test_create_event_default_capacity(self, test_client, admin_headers):
        payload = event_payload()
        del payload["max_participants"]
        response = test_client.post("/api/events", json=payload, headers=admin_headers)
        assert response.status_code == 201
        assert response.json()["max_participants"] == 100

    def test_create_event_in_the_past(self, test_client, admin_headers):
        response = test_client.post(
            "/api/events",
            json=event_payload(event_date="2026-02-27", registration_deadline=None),
            headers=admin_headers,
        )
        assert response.status_code == 400
        assert "past" in response.json()["detail"]

    @pytest.mark.parametrize("overrides", [
        {"title": "AB"},
        {"location": "  x "},
        {"time": "25:00"},
        {"max_participants": 0},
        {"max_participants": 10001},
        {"registration_deadline": "2026-03-20"},
        {"description": "x" * 1001},
    ])
    def test_create_event_validation(self, test_client, admin_headers, overrides):
        response = test_client.post(
            "/api/events", json=event_payload(**overrides), headers=admin_headers
        )
        assert response.status_code == 422

    def test_create_event_requires_auth(self, test_client):
        response = test_client.post("/api/events", json=event_payload())
        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_create_event_forbidden_for_students(self, test_client, student_headers):
        response = test_client.post(
            "/api/events", json=event_payload(), headers=student_headers(1)
        )
        assert response.status_code == 403

    def test_update_event(self, test_client, admin_headers, sample_event):
        event = sample_event(max_participants=10, participants=2)
        response = test_client.put(
            f"/api/events/{event.guid}",
            json={"title": "Renamed Talk", "max_participants": 5},
            headers=admin_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["title"] == "Renamed Talk"
        assert data["max_participants"] == 5
        assert data["spots_left"] == 3
        assert len(data["participants"]) == 2

    def test_update_capacity_below_participants(self, test_client, admin_headers, sample_event):
        event = sample_event(max_participants=10, participants=4)
        response = test_client.put(
            f"/api/events/{event.guid}",
            json={"max_participants": 3},
            headers=admin_headers,
        )
        assert response.status_code == 400

    def test_update_not_found(self, test_client, admin_headers):
        response = test_client.put(
            "/api/events/evt_01hgw2bbg00000000000000001",
            json={"title": "Nobody"},
            headers=admin_headers,
        )
        assert response.status_code == 404

    def test_cancel_event(self, test_client, admin_headers, sample_event):
        event = sample_event(days_ahead=5)
        response = test_client.patch(f"/api/events/{event.guid}/cancel", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["status"] == "cancelled"
        assert response.json()["registration_open"] is False

    def test_delete_event(self, test_client, admin_headers, sample_event):
        event = sample_event(participants=3)
        response = test_client.delete(f"/api/events/{event.guid}", headers=admin_headers)

        assert response.status_code == 200
        assert response.json() == {"message": "Event deleted successfully"}
        assert test_client.get(f"/api/events/{event.guid}").status_code == 404

    def test_remove_participant(self, test_client, admin_headers, sample_event):
        event = sample_event(participants=2)
        response = test_client.delete(
            f"/api/events/{event.guid}/participants/S001", headers=admin_headers
        )

        assert response.status_code == 200
        assert [p["student_id"] for p in response.json()["participants"]] == ["S002"]

    def test_remove_missing_participant(self, test_client, admin_headers, sample_event):
        event = sample_event(participants=1)
        response = test_client.delete(
            f"/api/events/{event.guid}/participants/S999", headers=admin_headers
        )
        assert response.status_code == 404

    def test_remove_all_participants(self, test_client, admin_headers, sample_event):
        event = sample_event(participants=3, max_participants=3)
        response = test_client.delete(
            f"/api/events/{event.guid}/participants", headers=admin_headers
        )

        assert response.status_code == 200
        data = response.json()
        assert data["participants"] == []
        assert data["spots_left"] == 3

    def test_list_participants(self, test_client, admin_headers, sample_event):
        event = sample_event(participants=2)
        response = test_client.get(
            f"/api/events/{event.guid}/participants", headers=admin_headers
        )

        assert response.status_code == 200
        data = response.json()
        assert [p["student_id"] for p in data] == ["S001", "S002"]
        assert data[0]["name"] == "Student 1"
        assert data[0]["email"] == "student1@college.edu"
        assert data[0]["registered_at"].endswith("Z")

    def test_list_participants_empty(self, test_client, admin_headers, sample_event):
        event = sample_event()
        response = test_client.get(
            f"/api/events/{event.guid}/participants", headers=admin_headers
        )
        assert response.status_code == 200
        assert response.json() == []

    def test_list_participants_not_found(self, test_client, admin_headers):
        response = test_client.get(
            "/api/events/evt_01hgw2bbg00000000000000001/participants",
            headers=admin_headers,
        )
        assert response.status_code == 404

    def test_list_participants_forbidden_for_students(self, test_client, student_headers,
                                                      sample_event):
        event = sample_event(participants=1)
        response = test_client.get(
            f"/api/events/{event.guid}/participants", headers=student_headers(1)
        )
        assert response.status_code == 403

    def test_list_participants_requires_auth(self, test_client, sample_event):
        event = sample_event(participants=1)
        response = test_client.get(f"/api/events/{event.guid}/participants")
        assert response.status_code == 401


class TestEventsAPIRegistration:
    """Student registration endpoint."""

    def test_register(self, test_client, student_headers, sample_event):
        event = sample_event(max_participants=2)
        response = test_client.post(
            f"/api/events/{event.guid}/register", headers=student_headers(1)
        )

        assert response.status_code == 201
        data = response.json()
        assert data["message"] == "Successfully registered for event"
        assert data["participant"]["student_id"] == "S001"
        assert data["participant"]["email"] == "student1@college.edu"
        assert data["event"]["participant_count"] == 1
        assert data["event"]["spots_left"] == 1

    def test_register_twice(self, test_client, student_headers, sample_event):
        event = sample_event()
        headers = student_headers(1)
        test_client.post(f"/api/events/{event.guid}/register", headers=headers)

        response = test_client.post(f"/api/events/{event.guid}/register", headers=headers)
        assert response.status_code == 400
        assert response.json() == {
            "error": "AlreadyRegistered",
            "message": "You are already registered for this event.",
        }

    def test_register_full(self, test_client, student_headers, sample_event):
        event = sample_event(max_participants=1)
        test_client.post(f"/api/events/{event.guid}/register", headers=student_headers(1))

        response = test_client.post(
            f"/api/events/{event.guid}/register", headers=student_headers(2)
        )
        assert response.status_code == 400
        assert response.json() == {
            "error": "EventFull",
            "message": "Event is full. Registration closed.",
        }

    @pytest.mark.parametrize("days_ahead,status,kind", [
        (-1, "upcoming", "EventEnded"),
        (0, "upcoming", "EventOngoing"),
        (5, "cancelled", "EventCancelled"),
    ])
    def test_register_rejected_by_status(self, test_client, student_headers, sample_event,
                                         days_ahead, status, kind):
        event = sample_event(days_ahead=days_ahead, status=status)
        response = test_client.post(
            f"/api/events/{event.guid}/register", headers=student_headers(1)
        )
        assert response.status_code == 400
        assert response.json()["error"] == kind

    def test_register_not_found(self, test_client, student_headers):
        response = test_client.post(
            "/api/events/evt_01hgw2bbg00000000000000001/register",
            headers=student_headers(1),
        )
        assert response.status_code == 404

    def test_register_requires_student(self, test_client, admin_headers, sample_event):
        event = sample_event()
        response = test_client.post(f"/api/events/{event.guid}/register", headers=admin_headers)
        assert response.status_code == 403

    def test_register_requires_auth(self, test_client, sample_event):
        event = sample_event()
        response = test_client.post(
            f"/api/events/{event.guid}/register",
            headers={"Authorization": "Bearer invalid"},
        )
        assert response.status_code == 401

    def test_register_rejects_oversized_student_id(self, test_client, sample_event):
        from backend.src.middleware.auth import create_access_token

        event = sample_event()
        token = create_access_token(
            subject="stu-long",
            role="student",
            student_id="S" * 25,
            name="Long Id",
            email="long@college.edu",
        )
        response = test_client.post(
            f"/api/events/{event.guid}/register",
            headers={"Authorization": f"Bearer {token}"},
        )

        assert response.status_code == 401
        assert event.participants == []


class TestStudentsAPI:
    """Student self-service endpoints."""

    def test_my_registrations(self, test_client, student_headers, sample_event):
        first = sample_event(title="First", days_ahead=3)
        sample_event(title="Skipped", days_ahead=4)
        third = sample_event(title="Third", days_ahead=5)
        headers = student_headers(7)

        test_client.post(f"/api/events/{third.guid}/register", headers=headers)
        test_client.post(f"/api/events/{first.guid}/register", headers=headers)

        response = test_client.get("/api/students/me/registrations", headers=headers)

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 2
        assert [e["title"] for e in data["events"]] == ["First", "Third"]

    def test_my_registrations_requires_student(self, test_client, admin_headers):
        response = test_client.get("/api/students/me/registrations", headers=admin_headers)
        assert response.status_code == 403


class TestHealth:
    """Health and root endpoints."""

    def test_health(self, test_client):
        response = test_client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_root(self, test_client):
        response = test_client.get("/")
        assert response.json()["message"] == "Campus Events API"
