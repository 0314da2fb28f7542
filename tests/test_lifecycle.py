"""
Event lifecycle tests.

Covers the edge table, per-state guards, state-entry effects and the
status + audit write performed by transition_to.
"""

from datetime import timedelta
from unittest.mock import ANY

import pytest

from eventflow.engine.errors import InvalidStateTransition
from eventflow.engine.lifecycle import TRANSITIONS
from eventflow.models import EventStatus

from conftest import NOW

ALLOWED = [
    (EventStatus.DRAFT, EventStatus.PLANNING),
    (EventStatus.DRAFT, EventStatus.CANCELLED),
    (EventStatus.PLANNING, EventStatus.INVITING),
    (EventStatus.PLANNING, EventStatus.CANCELLED),
    (EventStatus.INVITING, EventStatus.GATHERING_PREFERENCES),
    (EventStatus.INVITING, EventStatus.CONFIRMED),
    (EventStatus.INVITING, EventStatus.CANCELLED),
    (EventStatus.GATHERING_PREFERENCES, EventStatus.AI_RECOMMENDING),
    (EventStatus.GATHERING_PREFERENCES, EventStatus.CANCELLED),
    (EventStatus.AI_RECOMMENDING, EventStatus.VOTING),
    (EventStatus.AI_RECOMMENDING, EventStatus.CANCELLED),
    (EventStatus.VOTING, EventStatus.CONFIRMED),
    (EventStatus.VOTING, EventStatus.CANCELLED),
    (EventStatus.CONFIRMED, EventStatus.COMPLETED),
    (EventStatus.CONFIRMED, EventStatus.CANCELLED),
]


@pytest.fixture
def lifecycle(planning_engine):
    return planning_engine.lifecycle


# ============================================================================
# Edge table
# ============================================================================


def test_edge_table_is_exact():
    """Exactly the listed edges exist."""
    edges = {(src, dst) for src, targets in TRANSITIONS.items() for dst in targets}
    assert edges == set(ALLOWED)


@pytest.mark.parametrize("source,target", ALLOWED)
def test_can_transition_allowed(lifecycle, make_event, source, target):
    assert lifecycle.can_transition(make_event(status=source), target) is True


@pytest.mark.parametrize("source", [EventStatus.COMPLETED, EventStatus.CANCELLED])
def test_terminal_states_have_no_exits(lifecycle, make_event, source):
    event = make_event(status=source)
    assert not any(lifecycle.can_transition(event, target) for target in EventStatus)


def test_can_transition_accepts_strings(lifecycle, make_event):
    event = make_event(status=EventStatus.DRAFT)

    assert lifecycle.can_transition(event, "planning") is True
    assert lifecycle.can_transition(event, "voting") is False
    assert lifecycle.can_transition(event, "archived") is False


def test_skipping_states_not_allowed(lifecycle, make_event):
    assert lifecycle.can_transition(make_event(status=EventStatus.DRAFT), EventStatus.VOTING) is False


# ============================================================================
# Guards
# ============================================================================


@pytest.mark.asyncio
async def test_gathering_requires_acceptance_threshold(lifecycle, make_event):
    event = make_event(status=EventStatus.INVITING, expected_attendees=10)

    lifecycle.participants.count_accepted.return_value = 7
    assert await lifecycle.validate_transition(event, EventStatus.GATHERING_PREFERENCES) is True

    lifecycle.participants.count_accepted.return_value = 6
    assert await lifecycle.validate_transition(event, EventStatus.GATHERING_PREFERENCES) is False
    assert (
        await lifecycle.unmet_condition(event, EventStatus.GATHERING_PREFERENCES)
        == "only 6 accepted, 7 required"
    )


@pytest.mark.asyncio
async def test_gathering_uses_event_threshold(lifecycle, make_event):
    event = make_event(
        status=EventStatus.INVITING,
        expected_attendees=10,
        acceptance_threshold=0.5,
    )
    lifecycle.participants.count_accepted.return_value = 5

    assert await lifecycle.validate_transition(event, EventStatus.GATHERING_PREFERENCES) is True


@pytest.mark.asyncio
async def test_fractional_threshold_needs_exact_count(lifecycle, make_event):
    event = make_event(
        status=EventStatus.INVITING,
        expected_attendees=100,
        acceptance_threshold=0.55,
    )

    lifecycle.participants.count_accepted.return_value = 55
    assert await lifecycle.validate_transition(event, EventStatus.GATHERING_PREFERENCES) is True

    lifecycle.participants.count_accepted.return_value = 54
    assert (
        await lifecycle.unmet_condition(event, EventStatus.GATHERING_PREFERENCES)
        == "only 54 accepted, 55 required"
    )


@pytest.mark.asyncio
async def test_voting_requires_recommendations(lifecycle, make_event):
    event = make_event(status=EventStatus.AI_RECOMMENDING)

    lifecycle.recommendations.count_for_event.return_value = 0
    assert (
        await lifecycle.unmet_condition(event, EventStatus.VOTING)
        == "no recommendations have been generated"
    )

    lifecycle.recommendations.count_for_event.return_value = 1
    assert await lifecycle.validate_transition(event, EventStatus.VOTING) is True


@pytest.mark.asyncio
async def test_inviting_requires_event_details(lifecycle, make_event):
    event = make_event(status=EventStatus.PLANNING, title="")

    assert await lifecycle.unmet_condition(event, EventStatus.INVITING) == (
        "title and event type are required"
    )


@pytest.mark.asyncio
async def test_unguarded_target_only_checks_edge(lifecycle, make_event):
    event = make_event(status=EventStatus.VOTING)

    assert await lifecycle.validate_transition(event, EventStatus.CONFIRMED) is True
    assert await lifecycle.unmet_condition(event, EventStatus.PLANNING) == "transition not allowed"


@pytest.mark.asyncio
async def test_validate_transition_has_no_side_effects(lifecycle, make_event):
    event = make_event(status=EventStatus.INVITING)
    lifecycle.participants.count_accepted.return_value = 8

    first = await lifecycle.validate_transition(event, EventStatus.GATHERING_PREFERENCES)
    second = await lifecycle.validate_transition(event, EventStatus.GATHERING_PREFERENCES)

    assert first is second is True
    assert event.status == EventStatus.INVITING
    lifecycle.events.update_status.assert_not_awaited()
    lifecycle.audit.append.assert_not_awaited()


# ============================================================================
# transition_to
# ============================================================================


@pytest.mark.asyncio
async def test_transition_writes_status_and_audit(lifecycle, mock_session, make_event):
    event = make_event(status=EventStatus.CONFIRMED)

    result = await lifecycle.transition_to(event, EventStatus.COMPLETED)

    assert result is event
    assert event.status == EventStatus.COMPLETED
    assert event.completed_at is not None
    assert event.updated_at == event.completed_at

    mock_session.begin_nested.assert_called_once()
    lifecycle.events.update_status.assert_awaited_once_with(
        event.event_id,
        EventStatus.CONFIRMED,
        {"status": EventStatus.COMPLETED, "updated_at": ANY, "completed_at": ANY},
    )
    lifecycle.audit.append.assert_awaited_once_with(
        event.event_id, "confirmed", "completed", None
    )


@pytest.mark.asyncio
async def test_transition_passes_reason_to_audit(lifecycle, make_event):
    event = make_event(status=EventStatus.DRAFT)

    await lifecycle.transition_to(event, "planning", "Organizer started planning")

    assert event.status == EventStatus.PLANNING
    lifecycle.audit.append.assert_awaited_once_with(
        event.event_id, "draft", "planning", "Organizer started planning"
    )


@pytest.mark.asyncio
async def test_cancel_records_reason_on_event(lifecycle, make_event):
    event = make_event(status=EventStatus.INVITING)

    await lifecycle.transition_to(event, EventStatus.CANCELLED, "Venue closed")

    assert event.cancelled_at is not None
    assert event.cancellation_reason == "Venue closed"


@pytest.mark.asyncio
async def test_entering_ai_recommending_stamps_start(lifecycle, make_event):
    event = make_event(status=EventStatus.GATHERING_PREFERENCES)

    await lifecycle.transition_to(event, EventStatus.AI_RECOMMENDING)

    assert event.ai_analysis_started_at == event.updated_at


@pytest.mark.asyncio
async def test_entering_voting_sets_deadline(lifecycle, make_event):
    event = make_event(status=EventStatus.AI_RECOMMENDING)
    lifecycle.recommendations.count_for_event.return_value = 3

    await lifecycle.transition_to(event, EventStatus.VOTING)

    assert event.voting_deadline - event.updated_at == timedelta(days=3)


@pytest.mark.asyncio
async def test_entering_confirmed_stamps_confirmation(lifecycle, make_event):
    event = make_event(status=EventStatus.VOTING)

    await lifecycle.transition_to(event, EventStatus.CONFIRMED)

    assert event.confirmed_at is not None


@pytest.mark.asyncio
async def test_completion_keeps_earlier_stamps(lifecycle, make_event):
    started = NOW - timedelta(days=6)
    confirmed = NOW - timedelta(days=2)
    deadline = NOW - timedelta(days=3)
    event = make_event(
        status=EventStatus.CONFIRMED,
        ai_analysis_started_at=started,
        voting_deadline=deadline,
        confirmed_at=confirmed,
    )

    await lifecycle.transition_to(event, EventStatus.COMPLETED)

    assert event.ai_analysis_started_at == started
    assert event.voting_deadline == deadline
    assert event.confirmed_at == confirmed
    assert event.completed_at is not None
    values = lifecycle.events.update_status.await_args.args[2]
    assert set(values) == {"status", "updated_at", "completed_at"}


@pytest.mark.asyncio
async def test_rejected_transition_writes_nothing(lifecycle, make_event):
    event = make_event(status=EventStatus.DRAFT)

    with pytest.raises(InvalidStateTransition) as exc_info:
        await lifecycle.transition_to(event, EventStatus.VOTING)

    assert exc_info.value.current_status == "draft"
    assert exc_info.value.requested_status == "voting"
    assert exc_info.value.message == (
        "Cannot transition from draft to voting: transition not allowed"
    )
    assert event.status == EventStatus.DRAFT
    lifecycle.events.update_status.assert_not_awaited()
    lifecycle.audit.append.assert_not_awaited()


@pytest.mark.asyncio
async def test_guard_failure_names_condition(lifecycle, make_event):
    event = make_event(status=EventStatus.INVITING, expected_attendees=10)
    lifecycle.participants.count_accepted.return_value = 2

    with pytest.raises(InvalidStateTransition) as exc_info:
        await lifecycle.transition_to(event, EventStatus.GATHERING_PREFERENCES)

    assert exc_info.value.guard == "only 2 accepted, 7 required"
    lifecycle.events.update_status.assert_not_awaited()


@pytest.mark.asyncio
async def test_stale_status_is_rejected(lifecycle, make_event):
    """A concurrent writer already moved the event; the compare-and-set misses."""
    event = make_event(status=EventStatus.VOTING)
    lifecycle.events.update_status.return_value = False

    with pytest.raises(InvalidStateTransition) as exc_info:
        await lifecycle.transition_to(event, EventStatus.CONFIRMED)

    assert exc_info.value.guard == "event status changed concurrently"
    assert event.status == EventStatus.VOTING
    assert event.confirmed_at is None
    lifecycle.audit.append.assert_not_awaited()


@pytest.mark.asyncio
async def test_audit_failure_propagates_and_leaves_event_unchanged(lifecycle, make_event):
    event = make_event(status=EventStatus.VOTING)
    lifecycle.audit.append.side_effect = RuntimeError("Simulated audit write failure")

    with pytest.raises(RuntimeError, match="Simulated audit write failure"):
        await lifecycle.transition_to(event, EventStatus.CONFIRMED)

    assert event.status == EventStatus.VOTING
    assert event.confirmed_at is None
