"""SQLAlchemy table definitions."""

from datetime import date, datetime, time
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    Time,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB, UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column

from eventflow.db.base import Base
from eventflow.models.enums import EventStatus, InvitationStatus, VerificationStatus


def _values_enum(enum_cls: type) -> Enum:
    """Enum column persisted by value (``"gathering_preferences"``), not by name."""
    return Enum(
        enum_cls,
        name=enum_cls.__name__.lower(),
        values_callable=lambda members: [m.value for m in members],
    )


class EventTable(Base):
    """Events table - planned group gatherings."""

    __tablename__ = "events"

    event_id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True)
    organizer_id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), nullable=False)

    title: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    event_type: Mapped[str] = mapped_column(String(100), nullable=False, default="")

    status: Mapped[EventStatus] = mapped_column(
        _values_enum(EventStatus), nullable=False, default=EventStatus.DRAFT
    )

    # Schedule
    scheduled_date: Mapped[date] = mapped_column(Date, nullable=False)
    scheduled_time: Mapped[time] = mapped_column(Time, nullable=False)
    estimated_duration: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Sizing and budget
    expected_attendees: Mapped[int] = mapped_column(Integer, nullable=False)
    budget_total: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    acceptance_threshold: Mapped[Decimal | None] = mapped_column(Numeric(5, 4), nullable=True)

    # Deadlines
    rsvp_deadline: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    voting_deadline: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # State-entry timestamps
    ai_analysis_started_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    confirmed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    cancelled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    cancellation_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        # Sweeps scan by status
        Index("idx_events_status", "status"),
        # Overlap checks scan an organizer's day
        Index("idx_events_organizer_date", "organizer_id", "scheduled_date"),
    )


class ParticipantTable(Base):
    """Event participants table."""

    __tablename__ = "event_participants"

    event_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("events.event_id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True)
    invitation_status: Mapped[InvitationStatus] = mapped_column(
        _values_enum(InvitationStatus), nullable=False, default=InvitationStatus.PENDING
    )
    invited_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    responded_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("idx_participants_event_status", "event_id", "invitation_status"),
    )


class PreferenceTable(Base):
    """Per-user preference profiles."""

    __tablename__ = "user_preferences"

    user_id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True)
    cuisine_preferences: Mapped[str | None] = mapped_column(Text, nullable=True)
    budget_preference: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    distance_radius: Mapped[float | None] = mapped_column(Float, nullable=True)
    dietary_restrictions: Mapped[str | None] = mapped_column(Text, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class LocationTable(Base):
    """Last known user locations."""

    __tablename__ = "user_locations"

    user_id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True)
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class VenueTable(Base):
    """Venues table - places events can be held at."""

    __tablename__ = "venues"

    venue_id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    category: Mapped[str | None] = mapped_column(String(100), nullable=True)
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    price_level: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    average_rating: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    total_reviews: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    capacity: Mapped[int | None] = mapped_column(Integer, nullable=True)
    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    verification_status: Mapped[VerificationStatus] = mapped_column(
        _values_enum(VerificationStatus), nullable=False, default=VerificationStatus.PENDING
    )

    __table_args__ = (
        Index("idx_venues_listable", "is_deleted", "verification_status", "category"),
        Index("idx_venues_rating", "average_rating"),
    )


class PlaceOptionTable(Base):
    """Recommendation records - scored venue suggestions per event."""

    __tablename__ = "event_place_options"

    option_id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True)
    event_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("events.event_id", ondelete="CASCADE"),
        nullable=False,
    )
    venue_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True), ForeignKey("venues.venue_id"), nullable=False
    )
    suggested_by: Mapped[str] = mapped_column(String(50), nullable=False, default="AI")
    ai_score: Mapped[float] = mapped_column(Float, nullable=False)
    ai_reasoning: Mapped[str] = mapped_column(Text, nullable=False, default="")
    pros: Mapped[str] = mapped_column(Text, nullable=False, default="[]")
    cons: Mapped[str] = mapped_column(Text, nullable=False, default="[]")
    estimated_cost_per_person: Mapped[Decimal | None] = mapped_column(
        Numeric(10, 2), nullable=True
    )
    added_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        UniqueConstraint("event_id", "venue_id", "added_at", name="uq_option_event_venue_run"),
        Index("idx_options_event", "event_id", "ai_score"),
    )


class AuditLogTable(Base):
    """Audit log table - lifecycle transitions, append-only."""

    __tablename__ = "event_audit_logs"

    audit_id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True)
    event_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("events.event_id", ondelete="CASCADE"),
        nullable=False,
    )
    old_status: Mapped[str] = mapped_column(String(50), nullable=False)
    new_status: Mapped[str] = mapped_column(String(50), nullable=False)
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    changed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    additional_data: Mapped[dict[str, Any]] = mapped_column(JSONB, nullable=False, default={})

    __table_args__ = (
        Index("idx_audit_event", "event_id", "changed_at"),
    )
