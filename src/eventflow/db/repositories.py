"""Database repositories for EventFlow entities."""

from datetime import date, datetime, time
from typing import Any, Iterable
from uuid import UUID, uuid4

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from eventflow.config import settings
from eventflow.db.tables import (
    AuditLogTable,
    EventTable,
    LocationTable,
    ParticipantTable,
    PlaceOptionTable,
    PreferenceTable,
    VenueTable,
)
from eventflow.models import (
    AuditLogEntry,
    Event,
    EventPlaceOption,
    EventStatus,
    GeoPoint,
    InvitationStatus,
    Participant,
    PreferenceProfile,
    Venue,
    VerificationStatus,
)
from eventflow.models.audit import default_reason
from eventflow.utils.time import utc_now


def _minute_of_day(value: time) -> int:
    return value.hour * 60 + value.minute


class EventRepository:
    """Repository for event operations."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, event: Event) -> Event:
        """Insert a new event row."""
        row = EventTable(**event.model_dump())
        self.session.add(row)
        await self.session.flush()
        return self._row_to_model(row)

    async def get(self, event_id: UUID) -> Event | None:
        """Get an event by ID."""
        result = await self.session.execute(
            select(EventTable).where(EventTable.event_id == event_id)
        )
        row = result.scalar_one_or_none()
        return self._row_to_model(row) if row else None

    async def update_status(
        self,
        event_id: UUID,
        expected_status: EventStatus,
        values: dict[str, Any],
    ) -> bool:
        """
        Apply ``values`` only if the row still has ``expected_status``.

        The status predicate makes the write a compare-and-set: two callers
        validating against the same stale status cannot both win. Returns
        False when no row matched.
        """
        result = await self.session.execute(
            update(EventTable)
            .where(
                EventTable.event_id == event_id,
                EventTable.status == expected_status,
            )
            .values(**values)
        )
        return result.rowcount == 1

    async def find_overlapping(
        self,
        organizer_id: UUID,
        scheduled_date: date,
        scheduled_time: time,
        estimated_duration: int | None = None,
    ) -> list[Event]:
        """Organizer's live events on the same day whose time windows intersect."""
        query = select(EventTable).where(
            EventTable.organizer_id == organizer_id,
            EventTable.scheduled_date == scheduled_date,
            EventTable.status.not_in(list(EventStatus.terminal_states())),
        )
        result = await self.session.execute(query.order_by(EventTable.scheduled_time))
        candidates = [self._row_to_model(r) for r in result.scalars().all()]

        new_start = _minute_of_day(scheduled_time)
        new_end = new_start + (estimated_duration or settings.default_duration_minutes)

        overlapping = []
        for existing in candidates:
            existing_start = _minute_of_day(existing.scheduled_time)
            existing_end = existing_start + existing.duration_minutes
            # Half-open windows: touching end-to-start is not an overlap
            if new_start < existing_end and new_end > existing_start:
                overlapping.append(existing)
        return overlapping

    async def list_rsvp_expired(self, now: datetime, limit: int = 100) -> list[Event]:
        """
        Events still collecting responses whose RSVP deadline has passed with
        too few acceptances.

        The acceptance count is part of the query so healthy events past their
        deadline never fill a batch ahead of the ones that need cancelling.
        """
        accepted = (
            select(func.count())
            .select_from(ParticipantTable)
            .where(
                ParticipantTable.event_id == EventTable.event_id,
                ParticipantTable.invitation_status == InvitationStatus.ACCEPTED,
            )
            .correlate(EventTable)
            .scalar_subquery()
        )
        min_required = func.greatest(
            settings.min_participants,
            func.floor(EventTable.expected_attendees * settings.auto_cancel_min_ratio),
        )
        result = await self.session.execute(
            select(EventTable)
            .where(
                EventTable.status.in_(
                    [
                        EventStatus.PLANNING,
                        EventStatus.INVITING,
                        EventStatus.GATHERING_PREFERENCES,
                    ]
                ),
                EventTable.rsvp_deadline.is_not(None),
                EventTable.rsvp_deadline <= now,
                accepted < min_required,
            )
            .order_by(EventTable.rsvp_deadline)
            .limit(limit)
        )
        return [self._row_to_model(r) for r in result.scalars().all()]

    async def list_voting_expired(self, now: datetime, limit: int = 100) -> list[Event]:
        """Events in voting whose deadline has passed."""
        result = await self.session.execute(
            select(EventTable)
            .where(
                EventTable.status == EventStatus.VOTING,
                EventTable.voting_deadline.is_not(None),
                EventTable.voting_deadline <= now,
            )
            .order_by(EventTable.voting_deadline)
            .limit(limit)
        )
        return [self._row_to_model(r) for r in result.scalars().all()]

    async def list_confirmed_before(self, cutoff: date, limit: int = 100) -> list[Event]:
        """Confirmed events scheduled strictly before ``cutoff``."""
        result = await self.session.execute(
            select(EventTable)
            .where(
                EventTable.status == EventStatus.CONFIRMED,
                EventTable.scheduled_date < cutoff,
            )
            .order_by(EventTable.scheduled_date)
            .limit(limit)
        )
        return [self._row_to_model(r) for r in result.scalars().all()]

    def _row_to_model(self, row: EventTable) -> Event:
        """Convert database row to model."""
        return Event(
            event_id=row.event_id,
            organizer_id=row.organizer_id,
            title=row.title,
            description=row.description,
            event_type=row.event_type,
            status=row.status,
            scheduled_date=row.scheduled_date,
            scheduled_time=row.scheduled_time,
            estimated_duration=row.estimated_duration,
            expected_attendees=row.expected_attendees,
            budget_total=row.budget_total,
            acceptance_threshold=row.acceptance_threshold,
            rsvp_deadline=row.rsvp_deadline,
            voting_deadline=row.voting_deadline,
            ai_analysis_started_at=row.ai_analysis_started_at,
            confirmed_at=row.confirmed_at,
            cancelled_at=row.cancelled_at,
            cancellation_reason=row.cancellation_reason,
            completed_at=row.completed_at,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )


class ParticipantRepository:
    """Repository for event participants."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def add(
        self,
        event_id: UUID,
        user_id: UUID,
        invitation_status: InvitationStatus = InvitationStatus.PENDING,
    ) -> Participant:
        """Invite a user to an event."""
        now = utc_now()
        row = ParticipantTable(
            event_id=event_id,
            user_id=user_id,
            invitation_status=invitation_status,
            invited_at=now,
            responded_at=None if invitation_status == InvitationStatus.PENDING else now,
        )
        self.session.add(row)
        await self.session.flush()
        return Participant(
            event_id=row.event_id,
            user_id=row.user_id,
            invitation_status=row.invitation_status,
            invited_at=row.invited_at,
            responded_at=row.responded_at,
        )

    async def get_accepted_user_ids(self, event_id: UUID) -> list[UUID]:
        """User IDs of accepted participants, in invitation order."""
        result = await self.session.execute(
            select(ParticipantTable.user_id)
            .where(
                ParticipantTable.event_id == event_id,
                ParticipantTable.invitation_status == InvitationStatus.ACCEPTED,
            )
            .order_by(ParticipantTable.invited_at, ParticipantTable.user_id)
        )
        return list(result.scalars().all())

    async def count_accepted(self, event_id: UUID) -> int:
        """Number of accepted participants."""
        result = await self.session.execute(
            select(func.count())
            .select_from(ParticipantTable)
            .where(
                ParticipantTable.event_id == event_id,
                ParticipantTable.invitation_status == InvitationStatus.ACCEPTED,
            )
        )
        return result.scalar_one()


class PreferenceRepository:
    """Repository for user preference profiles."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, user_id: UUID) -> PreferenceProfile | None:
        """Get one user's profile."""
        row = await self.session.get(PreferenceTable, user_id)
        return self._row_to_model(row) if row else None

    async def get_by_user_ids(self, user_ids: Iterable[UUID]) -> list[PreferenceProfile]:
        """Profiles for the given users, in the order requested; missing users are skipped."""
        user_ids = list(user_ids)
        if not user_ids:
            return []

        result = await self.session.execute(
            select(PreferenceTable).where(PreferenceTable.user_id.in_(user_ids))
        )
        by_user = {row.user_id: row for row in result.scalars().all()}
        return [self._row_to_model(by_user[uid]) for uid in user_ids if uid in by_user]

    async def upsert(self, profile: PreferenceProfile) -> PreferenceProfile:
        """Create or update a user's profile."""
        now = utc_now()
        existing = await self.session.get(PreferenceTable, profile.user_id)

        if existing:
            existing.cuisine_preferences = profile.cuisine_preferences
            existing.budget_preference = profile.budget_preference
            existing.distance_radius = profile.distance_radius
            existing.dietary_restrictions = profile.dietary_restrictions
            existing.updated_at = now
        else:
            existing = PreferenceTable(**profile.model_dump(), updated_at=now)
            self.session.add(existing)

        await self.session.flush()
        return self._row_to_model(existing)

    def _row_to_model(self, row: PreferenceTable) -> PreferenceProfile:
        return PreferenceProfile(
            user_id=row.user_id,
            cuisine_preferences=row.cuisine_preferences,
            budget_preference=row.budget_preference,
            distance_radius=row.distance_radius,
            dietary_restrictions=row.dietary_restrictions,
        )


class LocationRepository:
    """Repository for user locations."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_user_ids(self, user_ids: Iterable[UUID]) -> list[GeoPoint]:
        """Known coordinates for the given users; users without a location are skipped."""
        user_ids = list(user_ids)
        if not user_ids:
            return []

        result = await self.session.execute(
            select(LocationTable).where(LocationTable.user_id.in_(user_ids))
        )
        return [
            GeoPoint(latitude=row.latitude, longitude=row.longitude)
            for row in result.scalars().all()
        ]

    async def upsert(self, user_id: UUID, point: GeoPoint) -> GeoPoint:
        """Record a user's latest location."""
        now = utc_now()
        existing = await self.session.get(LocationTable, user_id)
        if existing:
            existing.latitude = point.latitude
            existing.longitude = point.longitude
            existing.updated_at = now
        else:
            self.session.add(
                LocationTable(
                    user_id=user_id,
                    latitude=point.latitude,
                    longitude=point.longitude,
                    updated_at=now,
                )
            )
        await self.session.flush()
        return point


class VenueRepository:
    """Repository for venues."""

    def __init__(self, session: AsyncSession):
        self.session = session

    def _listable(self):
        return select(VenueTable).where(
            VenueTable.is_deleted.is_(False),
            VenueTable.verification_status == VerificationStatus.APPROVED,
        )

    async def add(self, venue: Venue) -> Venue:
        """Insert a venue."""
        row = VenueTable(**venue.model_dump())
        self.session.add(row)
        await self.session.flush()
        return self._row_to_model(row)

    async def get(self, venue_id: UUID) -> Venue | None:
        row = await self.session.get(VenueTable, venue_id)
        return self._row_to_model(row) if row else None

    async def list_candidates(
        self,
        categories: list[str] | None = None,
        limit: int = 50,
    ) -> list[Venue]:
        """Approved, non-deleted venues, optionally restricted to ``categories``."""
        query = self._listable()
        if categories:
            query = query.where(VenueTable.category.in_(categories))

        result = await self.session.execute(
            query.order_by(VenueTable.average_rating.desc(), VenueTable.name).limit(limit)
        )
        return [self._row_to_model(r) for r in result.scalars().all()]

    async def list_top_rated(self, limit: int = 20) -> list[Venue]:
        """Highest-rated approved, non-deleted venues regardless of category."""
        result = await self.session.execute(
            self._listable()
            .order_by(VenueTable.average_rating.desc(), VenueTable.total_reviews.desc())
            .limit(limit)
        )
        return [self._row_to_model(r) for r in result.scalars().all()]

    async def delete(self, venue_id: UUID) -> bool:
        """Soft-delete a venue. Returns False if it does not exist."""
        result = await self.session.execute(
            update(VenueTable)
            .where(VenueTable.venue_id == venue_id)
            .values(is_deleted=True)
        )
        return result.rowcount == 1

    def _row_to_model(self, row: VenueTable) -> Venue:
        return Venue(
            venue_id=row.venue_id,
            name=row.name,
            category=row.category,
            latitude=row.latitude,
            longitude=row.longitude,
            price_level=row.price_level,
            average_rating=row.average_rating,
            total_reviews=row.total_reviews,
            capacity=row.capacity,
            is_deleted=row.is_deleted,
            verification_status=row.verification_status,
        )


class RecommendationRepository:
    """Repository for event place options."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, option: EventPlaceOption) -> EventPlaceOption:
        """Persist a recommendation record."""
        self.session.add(PlaceOptionTable(**option.model_dump()))
        await self.session.flush()
        return option

    async def count_for_event(self, event_id: UUID) -> int:
        """Number of recommendations generated for an event."""
        result = await self.session.execute(
            select(func.count())
            .select_from(PlaceOptionTable)
            .where(PlaceOptionTable.event_id == event_id)
        )
        return result.scalar_one()

    async def list_for_event(self, event_id: UUID) -> list[EventPlaceOption]:
        """An event's recommendations, best score first."""
        result = await self.session.execute(
            select(PlaceOptionTable)
            .where(PlaceOptionTable.event_id == event_id)
            .order_by(PlaceOptionTable.ai_score.desc(), PlaceOptionTable.added_at)
        )
        return [
            EventPlaceOption(
                option_id=row.option_id,
                event_id=row.event_id,
                venue_id=row.venue_id,
                suggested_by=row.suggested_by,
                ai_score=row.ai_score,
                ai_reasoning=row.ai_reasoning,
                pros=row.pros,
                cons=row.cons,
                estimated_cost_per_person=row.estimated_cost_per_person,
                added_at=row.added_at,
            )
            for row in result.scalars().all()
        ]


class AuditLogRepository:
    """Append-only repository for lifecycle audit entries."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def append(
        self,
        event_id: UUID,
        old_status: str,
        new_status: str,
        reason: str | None = None,
        additional_data: dict[str, Any] | None = None,
    ) -> AuditLogEntry:
        """Record one transition."""
        entry = AuditLogEntry(
            audit_id=uuid4(),
            event_id=event_id,
            old_status=old_status,
            new_status=new_status,
            reason=reason if reason and reason.strip() else default_reason(old_status, new_status),
            changed_at=utc_now(),
            additional_data=additional_data or {},
        )
        self.session.add(AuditLogTable(**entry.model_dump()))
        await self.session.flush()
        return entry

    async def list_for_event(self, event_id: UUID) -> list[AuditLogEntry]:
        """An event's transitions, oldest first."""
        result = await self.session.execute(
            select(AuditLogTable)
            .where(AuditLogTable.event_id == event_id)
            .order_by(AuditLogTable.changed_at)
        )
        return [
            AuditLogEntry(
                audit_id=row.audit_id,
                event_id=row.event_id,
                old_status=row.old_status,
                new_status=row.new_status,
                reason=row.reason,
                changed_at=row.changed_at,
                additional_data=row.additional_data,
            )
            for row in result.scalars().all()
        ]
