"""Participant and location models."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from eventflow.models.enums import InvitationStatus


class Participant(BaseModel):
    """A user's membership in an event."""

    event_id: UUID
    user_id: UUID
    invitation_status: InvitationStatus = InvitationStatus.PENDING
    invited_at: datetime
    responded_at: Optional[datetime] = None


class GeoPoint(BaseModel):
    """A latitude/longitude pair in degrees."""

    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
