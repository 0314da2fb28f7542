"""EventFlow core engine - canonical planning operations."""

import logging
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any, Optional
from uuid import UUID, uuid4

from sqlalchemy.ext.asyncio import AsyncSession

from eventflow.config import settings
from eventflow.engine.aggregation import PreferenceAggregator
from eventflow.engine.errors import EventFlowError, EventNotFound
from eventflow.engine.lifecycle import EventLifecycle
from eventflow.engine.recommendations import RecommendationSelector
from eventflow.engine.rules import should_auto_cancel, should_auto_finalize, validate_new_event
from eventflow.engine.scoring import VenueScorer
from eventflow.models import (
    AggregatedPreferences,
    AuditLogEntry,
    Event,
    EventPlaceOption,
    EventStatus,
    GeoPoint,
)
from eventflow.utils.time import utc_now

logger = logging.getLogger(__name__)

AUTO_CANCEL_REASON = (
    "Event automatically cancelled because the invitation deadline passed "
    "with too few accepted participants."
)
AUTO_FINALIZE_REASON = "Voting deadline passed"
AUTO_COMPLETE_REASON = "Event date has passed"
WORKFLOW_REASON = "AI generate"


class PlanningEngine:
    """Core engine implementing canonical EventFlow operations."""

    def __init__(self, session: AsyncSession, scorer: Optional[VenueScorer] = None):
        self.session = session
        self.lifecycle = EventLifecycle(session)
        self.aggregator = PreferenceAggregator(session)
        self.selector = RecommendationSelector(session, scorer)

        # Repositories shared with the lifecycle
        self.events = self.lifecycle.events
        self.participants = self.lifecycle.participants
        self.recommendations = self.lifecycle.recommendations
        self.audit = self.lifecycle.audit

    # =========================================================================
    # Events
    # =========================================================================

    async def create_event(
        self,
        organizer_id: UUID,
        title: str,
        event_type: str,
        scheduled_date: date,
        scheduled_time: time,
        expected_attendees: int,
        description: str = "",
        estimated_duration: int | None = None,
        budget_total: Decimal | None = None,
        acceptance_threshold: Decimal | None = None,
        rsvp_deadline: datetime | None = None,
        now: datetime | None = None,
    ) -> Event:
        """
        Create a draft event after running the creation-time business rules.

        Raises BusinessRuleViolation for the first rule the event breaks;
        nothing is written in that case.
        """
        now = now or utc_now()
        event = Event(
            event_id=uuid4(),
            organizer_id=organizer_id,
            title=title,
            description=description,
            event_type=event_type,
            status=EventStatus.DRAFT,
            scheduled_date=scheduled_date,
            scheduled_time=scheduled_time,
            estimated_duration=estimated_duration,
            expected_attendees=expected_attendees,
            budget_total=budget_total,
            acceptance_threshold=acceptance_threshold,
            rsvp_deadline=rsvp_deadline,
            created_at=now,
            updated_at=now,
        )

        overlapping = await self.events.find_overlapping(
            organizer_id=organizer_id,
            scheduled_date=scheduled_date,
            scheduled_time=scheduled_time,
            estimated_duration=estimated_duration,
        )
        validate_new_event(event, overlapping, now)

        event = await self.events.create(event)
        logger.info(f"Created event {event.event_id} for organizer {organizer_id}")
        return event

    async def get_event(self, event_id: UUID) -> Event:
        """Get an event by ID."""
        event = await self.events.get(event_id)
        if not event:
            raise EventNotFound(str(event_id))
        return event

    async def transition(
        self,
        event_id: UUID,
        target: EventStatus | str,
        reason: Optional[str] = None,
    ) -> Event:
        """Load an event and move it to ``target``."""
        event = await self.get_event(event_id)
        return await self.lifecycle.transition_to(event, target, reason)

    async def check_transition(
        self, event_id: UUID, target: EventStatus | str
    ) -> tuple[Event, Optional[str]]:
        """Dry run: the loaded event and the unmet condition blocking ``target``, or None."""
        event = await self.get_event(event_id)
        return event, await self.lifecycle.unmet_condition(event, target)

    async def list_audit_log(self, event_id: UUID) -> list[AuditLogEntry]:
        """An event's transition history, oldest first."""
        await self.get_event(event_id)
        return await self.audit.list_for_event(event_id)

    # =========================================================================
    # Preferences & recommendations
    # =========================================================================

    async def aggregate_preferences(self, event_id: UUID) -> AggregatedPreferences:
        """Consensus profile of the event's accepted participants."""
        await self.get_event(event_id)
        return await self.aggregator.aggregate(event_id)

    async def generate_recommendations(
        self,
        event_id: UUID,
        search_location: Optional[GeoPoint] = None,
    ) -> list[EventPlaceOption]:
        """Aggregate preferences and generate recommendations, without transitions."""
        preferences = await self.aggregate_preferences(event_id)
        return await self.selector.generate_recommendations(
            event_id, preferences, search_location
        )

    async def list_recommendations(self, event_id: UUID) -> list[EventPlaceOption]:
        await self.get_event(event_id)
        return await self.recommendations.list_for_event(event_id)

    async def run_recommendation_workflow(
        self,
        event_id: UUID,
        search_location: Optional[GeoPoint] = None,
    ) -> dict[str, Any]:
        """
        Drive an event from invitations to voting.

        inviting -> gathering_preferences (if needed), aggregate preferences,
        -> ai_recommending (if not already there), generate recommendations,
        then -> voting. When nothing was recommended the event stays in
        ai_recommending so the run can be retried.
        """
        event = await self.get_event(event_id)

        if event.status == EventStatus.INVITING:
            event = await self.lifecycle.transition_to(event, EventStatus.GATHERING_PREFERENCES)

        preferences = await self.aggregator.aggregate(event_id)

        if event.status != EventStatus.AI_RECOMMENDING:
            event = await self.lifecycle.transition_to(
                event, EventStatus.AI_RECOMMENDING, WORKFLOW_REASON
            )

        options = await self.selector.generate_recommendations(
            event_id, preferences, search_location
        )

        if options:
            event = await self.lifecycle.transition_to(event, EventStatus.VOTING, WORKFLOW_REASON)
        else:
            logger.warning(f"No recommendations generated for event {event_id}")

        return {
            "event_id": event.event_id,
            "status": event.status.value,
            "count": len(options),
            "options": options,
        }

    # =========================================================================
    # Lifecycle sweeps
    # =========================================================================

    async def _sweep_transition(
        self,
        event: Event,
        target: EventStatus,
        reason: str,
    ) -> bool:
        """Transition one swept event; rejections are logged and skipped."""
        try:
            await self.lifecycle.transition_to(event, target, reason)
            return True
        except EventFlowError as e:
            logger.error(f"Sweep could not move event {event.event_id} to {target.value}: {e.message}")
            return False

    async def auto_cancel_expired(self, now: Optional[datetime] = None, batch_size: int = 100) -> int:
        """Cancel events whose RSVP window closed with too few acceptances."""
        now = now or utc_now()
        cancelled = 0
        for event in await self.events.list_rsvp_expired(now, limit=batch_size):
            accepted = await self.participants.count_accepted(event.event_id)
            if not should_auto_cancel(event, accepted, event.rsvp_deadline, now):
                continue
            if await self._sweep_transition(event, EventStatus.CANCELLED, AUTO_CANCEL_REASON):
                cancelled += 1
        return cancelled

    async def auto_finalize_voting(self, now: Optional[datetime] = None, batch_size: int = 100) -> int:
        """Confirm events whose voting deadline has passed."""
        now = now or utc_now()
        finalized = 0
        for event in await self.events.list_voting_expired(now, limit=batch_size):
            if not should_auto_finalize(event, now):
                continue
            if await self._sweep_transition(event, EventStatus.CONFIRMED, AUTO_FINALIZE_REASON):
                finalized += 1
        return finalized

    async def auto_complete_past(self, now: Optional[datetime] = None, batch_size: int = 100) -> int:
        """Complete confirmed events that took place more than the grace period ago."""
        now = now or utc_now()
        cutoff = (now - timedelta(days=settings.completion_grace_days)).date()
        completed = 0
        for event in await self.events.list_confirmed_before(cutoff, limit=batch_size):
            if await self._sweep_transition(event, EventStatus.COMPLETED, AUTO_COMPLETE_REASON):
                completed += 1
        return completed
