"""API request/response schemas."""

from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from eventflow.models import EventPlaceOption


# ============================================================================
# Shared schemas
# ============================================================================


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str


class SearchLocation(BaseModel):
    """Optional reference point for recommendation scoring."""

    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


# ============================================================================
# Events
# ============================================================================


class CreateEventRequest(BaseModel):
    """Create event request."""

    organizer_id: UUID
    title: str = Field(..., min_length=1, max_length=255)
    event_type: str = Field(..., min_length=1, max_length=100)
    description: str = ""
    scheduled_date: date
    scheduled_time: time
    estimated_duration: Optional[int] = Field(None, ge=1, description="Minutes")
    expected_attendees: int = Field(..., ge=1)
    budget_total: Optional[Decimal] = Field(None, ge=0)
    acceptance_threshold: Optional[Decimal] = Field(None, gt=0, le=1)
    rsvp_deadline: Optional[datetime] = None


class TransitionRequest(BaseModel):
    """Lifecycle transition request."""

    status: str = Field(..., description="Target status")
    reason: Optional[str] = Field(None, max_length=1000)


class TransitionCheckResponse(BaseModel):
    """Dry-run transition verdict."""

    allowed: bool
    current_status: str
    requested_status: str
    unmet_condition: Optional[str] = None


# ============================================================================
# Recommendations
# ============================================================================


class GenerateRecommendationsRequest(BaseModel):
    """Recommendation run options."""

    location: Optional[SearchLocation] = None


class RecommendationResponse(BaseModel):
    """Recommendation record as exposed over the API."""

    option_id: UUID
    venue_id: UUID
    suggested_by: str
    ai_score: float
    ai_reasoning: str
    pros: list[str]
    cons: list[str]
    estimated_cost_per_person: Optional[Decimal] = None
    added_at: datetime

    @classmethod
    def from_option(cls, option: EventPlaceOption) -> "RecommendationResponse":
        return cls(
            option_id=option.option_id,
            venue_id=option.venue_id,
            suggested_by=option.suggested_by,
            ai_score=option.ai_score,
            ai_reasoning=option.ai_reasoning,
            pros=option.pros_list(),
            cons=option.cons_list(),
            estimated_cost_per_person=option.estimated_cost_per_person,
            added_at=option.added_at,
        )


class WorkflowResponse(BaseModel):
    """Result of the generate-recommendations workflow."""

    event_id: UUID
    status: str
    count: int
    recommendations: list[RecommendationResponse]
    message: str


class AuditLogResponse(BaseModel):
    """One audit entry."""

    audit_id: UUID
    old_status: str
    new_status: str
    reason: str
    changed_at: datetime
    additional_data: dict[str, Any]
