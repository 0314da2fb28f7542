"""Event lifecycle state machine.

Transitions are checked in two layers: the fixed edge table (structural) and
a per-target guard that may consult live counts. A successful transition
writes the event row and one audit entry inside a single SAVEPOINT, so the
status never changes without its audit record.
"""

import logging
from datetime import date, datetime, timedelta
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Mapping, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from eventflow.config import settings
from eventflow.db.repositories import (
    AuditLogRepository,
    EventRepository,
    ParticipantRepository,
    RecommendationRepository,
)
from eventflow.engine.errors import InvalidStateTransition
from eventflow.engine.rules import check_acceptance_threshold
from eventflow.models import Event, EventStatus
from eventflow.utils.time import utc_now

logger = logging.getLogger(__name__)


TRANSITIONS: Mapping[EventStatus, frozenset[EventStatus]] = MappingProxyType(
    {
        EventStatus.DRAFT: frozenset({EventStatus.PLANNING, EventStatus.CANCELLED}),
        EventStatus.PLANNING: frozenset({EventStatus.INVITING, EventStatus.CANCELLED}),
        EventStatus.INVITING: frozenset(
            {
                EventStatus.GATHERING_PREFERENCES,
                EventStatus.CONFIRMED,
                EventStatus.CANCELLED,
            }
        ),
        EventStatus.GATHERING_PREFERENCES: frozenset(
            {EventStatus.AI_RECOMMENDING, EventStatus.CANCELLED}
        ),
        EventStatus.AI_RECOMMENDING: frozenset({EventStatus.VOTING, EventStatus.CANCELLED}),
        EventStatus.VOTING: frozenset({EventStatus.CONFIRMED, EventStatus.CANCELLED}),
        EventStatus.CONFIRMED: frozenset({EventStatus.COMPLETED, EventStatus.CANCELLED}),
        EventStatus.COMPLETED: frozenset(),
        EventStatus.CANCELLED: frozenset(),
    }
)


# State-entry effects: (now, reason) -> extra column values
EntryEffect = Callable[[datetime, Optional[str]], dict[str, Any]]

ENTRY_EFFECTS: Mapping[EventStatus, EntryEffect] = MappingProxyType(
    {
        EventStatus.AI_RECOMMENDING: lambda now, reason: {"ai_analysis_started_at": now},
        EventStatus.VOTING: lambda now, reason: {
            "voting_deadline": now + timedelta(days=settings.voting_window_days)
        },
        EventStatus.CONFIRMED: lambda now, reason: {"confirmed_at": now},
        EventStatus.CANCELLED: lambda now, reason: {
            "cancelled_at": now,
            "cancellation_reason": reason,
        },
        EventStatus.COMPLETED: lambda now, reason: {"completed_at": now},
    }
)


def _coerce_status(value: EventStatus | str) -> EventStatus | None:
    try:
        return EventStatus(value)
    except ValueError:
        return None


class EventLifecycle:
    """Validates and performs event status transitions."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.events = EventRepository(session)
        self.participants = ParticipantRepository(session)
        self.recommendations = RecommendationRepository(session)
        self.audit = AuditLogRepository(session)

        self._guards: dict[EventStatus, Callable[[Event], Awaitable[Optional[str]]]] = {
            EventStatus.INVITING: self._require_event_details,
            EventStatus.GATHERING_PREFERENCES: self._require_acceptance_threshold,
            EventStatus.VOTING: self._require_recommendations,
        }

    # =========================================================================
    # Guards - return a description of the unmet condition, or None
    # =========================================================================

    async def _require_event_details(self, event: Event) -> Optional[str]:
        if not event.title or not event.event_type:
            return "title and event type are required"
        if event.scheduled_date is None or event.scheduled_date <= date.min:
            return "a scheduled date is required"
        return None

    async def _require_acceptance_threshold(self, event: Event) -> Optional[str]:
        accepted = await self.participants.count_accepted(event.event_id)
        if check_acceptance_threshold(accepted, event.expected_attendees, event.threshold):
            return None
        required = event.expected_attendees * event.threshold
        return f"only {accepted} accepted, {required.normalize():f} required"

    async def _require_recommendations(self, event: Event) -> Optional[str]:
        count = await self.recommendations.count_for_event(event.event_id)
        if count >= 1:
            return None
        return "no recommendations have been generated"

    # =========================================================================
    # Public API
    # =========================================================================

    def can_transition(self, event: Event, target: EventStatus | str) -> bool:
        """Structural check against the edge table. No side effects."""
        target = _coerce_status(target)
        if target is None:
            return False
        return target in TRANSITIONS.get(event.status, frozenset())

    async def unmet_condition(self, event: Event, target: EventStatus | str) -> Optional[str]:
        """Why ``event`` cannot move to ``target`` right now, or None if it can."""
        if not self.can_transition(event, target):
            return "transition not allowed"
        guard = self._guards.get(EventStatus(target))
        if guard is None:
            return None
        return await guard(event)

    async def validate_transition(self, event: Event, target: EventStatus | str) -> bool:
        """Structural check plus the target state's guard. No side effects."""
        return await self.unmet_condition(event, target) is None

    async def check_transition(self, event: Event, target: EventStatus | str) -> None:
        """Like validate_transition, but raise InvalidStateTransition on failure."""
        condition = await self.unmet_condition(event, target)
        if condition is not None:
            raise InvalidStateTransition(
                event.status.value,
                getattr(target, "value", target),
                guard=condition,
            )

    async def transition_to(
        self,
        event: Event,
        target: EventStatus | str,
        reason: Optional[str] = None,
    ) -> Event:
        """
        Move ``event`` to ``target``.

        Raises InvalidStateTransition (nothing written) if the edge or guard
        fails, or if another caller changed the status since ``event`` was
        loaded. The caller's ``event`` is updated only after both the row
        update and the audit entry have been written.
        """
        try:
            await self.check_transition(event, target)
        except InvalidStateTransition as e:
            logger.warning(f"Rejected transition for event {event.event_id}: {e.message}")
            raise

        target = EventStatus(target)
        old_status = event.status
        now = utc_now()

        values: dict[str, Any] = {"status": target, "updated_at": now}
        effect = ENTRY_EFFECTS.get(target)
        if effect:
            values.update(effect(now, reason))

        # ATOMIC BLOCK - status update + audit entry
        async with self.session.begin_nested():  # SAVEPOINT
            updated = await self.events.update_status(event.event_id, old_status, values)
            if not updated:
                raise InvalidStateTransition(
                    old_status.value,
                    target.value,
                    guard="event status changed concurrently",
                )
            await self.audit.append(event.event_id, old_status.value, target.value, reason)

        for field, value in values.items():
            setattr(event, field, value)

        logger.info(f"Event {event.event_id} transitioned {old_status.value} -> {target.value}")
        return event
