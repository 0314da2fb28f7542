"""Venue and recommendation models."""

import json
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from eventflow.models.enums import VerificationStatus


class Venue(BaseModel):
    """A place an event can be held at."""

    venue_id: UUID
    name: str
    category: Optional[str] = None
    latitude: float
    longitude: float
    price_level: Optional[Decimal] = Field(default=None, description="Typical cost per person")
    average_rating: float = 0.0
    total_reviews: int = 0
    capacity: Optional[int] = None
    is_deleted: bool = False
    verification_status: VerificationStatus = VerificationStatus.PENDING


class VenueScore(BaseModel):
    """Scorer verdict for one venue."""

    score: float
    reasoning: str = ""
    pros: list[str] = Field(default_factory=list)
    cons: list[str] = Field(default_factory=list)


class EventPlaceOption(BaseModel):
    """A persisted venue suggestion attached to an event."""

    option_id: UUID
    event_id: UUID
    venue_id: UUID
    suggested_by: str = "AI"
    ai_score: float
    ai_reasoning: str = ""
    pros: str = "[]"
    cons: str = "[]"
    estimated_cost_per_person: Optional[Decimal] = None
    added_at: datetime

    def pros_list(self) -> list[str]:
        return json.loads(self.pros)

    def cons_list(self) -> list[str]:
        return json.loads(self.cons)
