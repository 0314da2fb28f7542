"""Event business rules.

Validators raise :class:`BusinessRuleViolation` carrying a stable
:class:`RuleId`; predicates return ``bool``. None of these functions touch
storage, so callers pass in whatever live counts a rule needs.
"""

import math
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional, Sequence

from eventflow.config import settings
from eventflow.engine.errors import BusinessRuleViolation
from eventflow.models import Event, EventStatus, RuleId
from eventflow.utils.time import add_minutes, start_of_day, utc_now


def validate_minimum_advance_scheduling(event: Event, now: Optional[datetime] = None) -> None:
    """Reject events scheduled too close to now."""
    now = now or utc_now()
    earliest = now + timedelta(days=settings.min_advance_days)
    if start_of_day(event.scheduled_date) <= earliest:
        raise BusinessRuleViolation(
            RuleId.MIN_ADVANCE_SCHEDULING,
            f"Event must be scheduled at least {settings.min_advance_days} days in advance "
            "to allow for proper planning and invitations.",
        )


def validate_minimum_participants(event: Event) -> None:
    """Reject events planned for fewer than the minimum group size."""
    if event.expected_attendees < settings.min_participants:
        raise BusinessRuleViolation(
            RuleId.MIN_PARTICIPANTS,
            f"Event requires at least {settings.min_participants} participants. "
            "Use a personal itinerary for solo activities.",
        )


def validate_budget(event: Event) -> None:
    """Reject budgets below the per-person floor."""
    if event.budget_total is None:
        return
    required = event.expected_attendees * settings.min_budget_per_person
    if event.budget_total < required:
        raise BusinessRuleViolation(
            RuleId.BUDGET_FLOOR,
            f"Budget too low. Minimum {settings.min_budget_per_person:.2f} per person required "
            f"({required:.2f} for {event.expected_attendees} attendees).",
        )


def check_acceptance_threshold(
    accepted_count: int,
    expected_attendees: int,
    threshold: Optional[Decimal | float] = None,
) -> bool:
    """
    True when enough invitees accepted.

    The comparison runs in Decimal so a ratio such as 0.55 of 100 requires
    exactly 55 acceptances.
    """
    if threshold is None:
        threshold = settings.default_acceptance_threshold
    return accepted_count >= expected_attendees * Decimal(str(threshold))


def should_auto_cancel(
    event: Event,
    accepted_count: int,
    invitation_deadline: datetime,
    now: Optional[datetime] = None,
) -> bool:
    """True when the invitation window closed with too few acceptances."""
    now = now or utc_now()
    min_required = max(
        settings.min_participants,
        math.floor(event.expected_attendees * settings.auto_cancel_min_ratio),
    )
    return now > invitation_deadline and accepted_count < min_required


def should_auto_finalize(event: Event, now: Optional[datetime] = None) -> bool:
    """True once the voting deadline has passed."""
    if event.voting_deadline is None:
        return False
    now = now or utc_now()
    return now >= event.voting_deadline


def validate_no_time_overlap(overlapping_events: Sequence[Event], new_event: Event) -> None:
    """Reject the new event if anything overlaps it; cites the first overlap."""
    if not overlapping_events:
        return

    existing = overlapping_events[0]
    start = existing.scheduled_time
    end = add_minutes(start, existing.duration_minutes)
    raise BusinessRuleViolation(
        RuleId.NO_TIME_OVERLAP,
        f"Cannot create event because it overlaps with existing event '{existing.title}' "
        f"(Time: {start:%H:%M} - {end:%H:%M}). "
        "Please choose a different time or cancel the existing event first.",
    )


def validate_invitation_deadline(event: Event, now: Optional[datetime] = None) -> None:
    """Reject invitations after the RSVP deadline."""
    now = now or utc_now()
    if event.rsvp_deadline is not None and now > event.rsvp_deadline:
        raise BusinessRuleViolation(
            RuleId.INVITATION_DEADLINE,
            "The invitation deadline for this event has passed.",
        )


def validate_status_for_invitations(status: EventStatus | str) -> None:
    """Reject invitations once the event is past preference gathering."""
    if isinstance(status, EventStatus):
        status = status.value
    allowed = {s.value for s in EventStatus.invitation_states()}
    if status.lower() not in allowed:
        raise BusinessRuleViolation(
            RuleId.INVITATION_STATUS,
            f"Cannot send invitations when event is in {status} status.",
        )


def validate_new_event(
    event: Event,
    overlapping_events: Sequence[Event] = (),
    now: Optional[datetime] = None,
) -> None:
    """Run the creation-time rules in order; the first failure wins."""
    validate_minimum_advance_scheduling(event, now)
    validate_minimum_participants(event)
    validate_budget(event)
    validate_no_time_overlap(overlapping_events, event)
