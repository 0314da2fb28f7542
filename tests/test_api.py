"""
HTTP API tests. Storage is mocked; these check routing, payload shapes and
the mapping of engine errors to status codes.
"""

from datetime import timedelta
from uuid import uuid4

import pytest

from eventflow.models import AuditLogEntry, EventStatus, VenueScore
from eventflow.utils.time import utc_now


class FixedScorer:
    def score(self, venue, preferences, event, locations):
        return VenueScore(score=88, reasoning="Close to everyone", pros=["Quiet"], cons=[])


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/v1/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "version": "0.1.0"}


@pytest.mark.asyncio
async def test_create_event(client, planning_engine):
    planning_engine.events.create.side_effect = lambda event: event
    payload = {
        "organizer_id": str(uuid4()),
        "title": "Quarterly dinner",
        "event_type": "dinner",
        "scheduled_date": (utc_now() + timedelta(days=14)).date().isoformat(),
        "scheduled_time": "19:00:00",
        "expected_attendees": 6,
        "budget_total": "300",
    }

    response = await client.post("/v1/events", json=payload)

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "draft"
    assert body["title"] == "Quarterly dinner"


@pytest.mark.asyncio
async def test_create_event_rule_violation_is_422(client):
    payload = {
        "organizer_id": str(uuid4()),
        "title": "Tomorrow",
        "event_type": "dinner",
        "scheduled_date": (utc_now() + timedelta(days=1)).date().isoformat(),
        "scheduled_time": "19:00:00",
        "expected_attendees": 6,
    }

    response = await client.post("/v1/events", json=payload)

    assert response.status_code == 422
    detail = response.json()["detail"]
    assert detail["code"] == "BUSINESS_RULE_VIOLATION"
    assert detail["rule_id"] == "min_advance_scheduling"


@pytest.mark.asyncio
async def test_get_missing_event_is_404(client, planning_engine):
    planning_engine.events.get.return_value = None

    response = await client.get(f"/v1/events/{uuid4()}")

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_transition(client, planning_engine, make_event):
    event = make_event(status=EventStatus.DRAFT)
    planning_engine.events.get.return_value = event

    response = await client.post(
        f"/v1/events/{event.event_id}/transitions",
        json={"status": "planning", "reason": "Kick-off"},
    )

    assert response.status_code == 200
    assert response.json()["status"] == "planning"
    planning_engine.audit.append.assert_awaited_once_with(
        event.event_id, "draft", "planning", "Kick-off"
    )


@pytest.mark.asyncio
async def test_invalid_transition_is_409(client, planning_engine, make_event):
    event = make_event(status=EventStatus.COMPLETED)
    planning_engine.events.get.return_value = event

    response = await client.post(
        f"/v1/events/{event.event_id}/transitions",
        json={"status": "planning"},
    )

    assert response.status_code == 409
    detail = response.json()["detail"]
    assert detail["code"] == "INVALID_STATE_TRANSITION"
    assert detail["current_status"] == "completed"
    assert detail["requested_status"] == "planning"


@pytest.mark.asyncio
async def test_check_transition(client, planning_engine, make_event):
    event = make_event(status=EventStatus.AI_RECOMMENDING)
    planning_engine.events.get.return_value = event

    response = await client.get(f"/v1/events/{event.event_id}/transitions/voting")

    assert response.status_code == 200
    assert response.json() == {
        "allowed": False,
        "current_status": "ai_recommending",
        "requested_status": "voting",
        "unmet_condition": "no recommendations have been generated",
    }
    planning_engine.events.get.assert_awaited_once_with(event.event_id)


@pytest.mark.asyncio
async def test_audit_log(client, planning_engine, make_event):
    event = make_event(status=EventStatus.PLANNING)
    planning_engine.events.get.return_value = event
    planning_engine.audit.list_for_event.return_value = [
        AuditLogEntry(
            audit_id=uuid4(),
            event_id=event.event_id,
            old_status="draft",
            new_status="planning",
            reason="Status changed from draft to planning",
            changed_at=utc_now(),
        )
    ]

    response = await client.get(f"/v1/events/{event.event_id}/audit")

    assert response.status_code == 200
    entries = response.json()
    assert len(entries) == 1
    assert entries[0]["reason"] == "Status changed from draft to planning"


@pytest.mark.asyncio
async def test_aggregated_preferences(client, planning_engine, make_event):
    event = make_event(status=EventStatus.GATHERING_PREFERENCES)
    planning_engine.events.get.return_value = event

    response = await client.get(f"/v1/events/{event.event_id}/preferences")

    assert response.status_code == 200
    body = response.json()
    assert body["average_budget"] == 30
    assert body["max_distance_radius"] == 10.0
    assert body["dietary_restrictions"] == []


@pytest.mark.asyncio
async def test_list_recommendations(client, planning_engine, make_event, make_option):
    event = make_event(status=EventStatus.VOTING)
    planning_engine.events.get.return_value = event
    planning_engine.recommendations.list_for_event.return_value = [make_option(event.event_id)]

    response = await client.get(f"/v1/events/{event.event_id}/recommendations")

    assert response.status_code == 200
    options = response.json()
    assert options[0]["pros"] == ["Fits a group of 10"]
    assert options[0]["cons"] == []
    assert options[0]["suggested_by"] == "AI"


@pytest.mark.asyncio
async def test_generate_recommendations_workflow(client, planning_engine, make_event, make_venue):
    event = make_event(status=EventStatus.GATHERING_PREFERENCES)
    planning_engine.events.get.return_value = event
    planning_engine.selector.venues.list_candidates.return_value = [make_venue()]
    planning_engine.selector.scorer = FixedScorer()
    planning_engine.recommendations.count_for_event.return_value = 1

    response = await client.post(
        f"/v1/events/{event.event_id}/generate-recommendations",
        json={"location": {"latitude": 10.77, "longitude": 106.7}},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "voting"
    assert body["count"] == 1
    assert body["message"] == "Recommendations generated successfully"
    assert body["recommendations"][0]["pros"] == ["Quiet"]


@pytest.mark.asyncio
async def test_generate_recommendations_workflow_empty(client, planning_engine, make_event):
    event = make_event(status=EventStatus.GATHERING_PREFERENCES)
    planning_engine.events.get.return_value = event

    response = await client.post(f"/v1/events/{event.event_id}/generate-recommendations")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ai_recommending"
    assert body["count"] == 0
    assert body["recommendations"] == []
    assert body["message"].startswith("No recommendations were generated")
