"""Event model - the planned group gathering."""

from datetime import date, datetime, time
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from eventflow.config import settings
from eventflow.models.enums import EventStatus


class Event(BaseModel):
    """Group event moving through the planning lifecycle."""

    # Identity
    event_id: UUID
    organizer_id: UUID

    # Description
    title: str = ""
    description: str = ""
    event_type: str = ""

    # Status
    status: EventStatus = EventStatus.DRAFT

    # Schedule
    scheduled_date: date
    scheduled_time: time = time(0, 0)
    estimated_duration: Optional[int] = Field(default=None, ge=1, description="Minutes")

    # Sizing and budget
    expected_attendees: int = Field(default=1, ge=1)
    budget_total: Optional[Decimal] = None
    acceptance_threshold: Optional[Decimal] = Field(default=None, gt=0, le=1)

    # Deadlines
    rsvp_deadline: Optional[datetime] = None
    voting_deadline: Optional[datetime] = None

    # State-entry timestamps (set once by the lifecycle, never cleared)
    ai_analysis_started_at: Optional[datetime] = None
    confirmed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    cancellation_reason: Optional[str] = None
    completed_at: Optional[datetime] = None

    created_at: datetime
    updated_at: datetime

    @property
    def duration_minutes(self) -> int:
        """Estimated duration, falling back to the configured default."""
        return self.estimated_duration or settings.default_duration_minutes

    @property
    def threshold(self) -> Decimal:
        """Acceptance threshold, falling back to the configured default."""
        if self.acceptance_threshold is None:
            return Decimal(str(settings.default_acceptance_threshold))
        return self.acceptance_threshold
