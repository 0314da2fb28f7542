"""Preference models - individual profiles and the consensus profile."""

from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class PreferenceProfile(BaseModel):
    """A single user's planning preferences."""

    user_id: UUID
    cuisine_preferences: Optional[str] = Field(
        default=None, description="Comma-separated cuisine tags"
    )
    budget_preference: Optional[Decimal] = Field(default=None, description="Per person")
    distance_radius: Optional[float] = Field(default=None, ge=0, description="Kilometers")
    # Reserved: not read by aggregation yet
    dietary_restrictions: Optional[str] = None

    def cuisine_tags(self) -> list[str]:
        """Split the cuisine text into trimmed, non-empty tags."""
        if not self.cuisine_preferences:
            return []
        tags = (tag.strip() for tag in self.cuisine_preferences.split(","))
        return [tag for tag in tags if tag]


class AggregatedPreferences(BaseModel):
    """Consensus profile of an event's accepted participants. Never persisted."""

    model_config = ConfigDict(frozen=True)

    participant_ids: list[UUID] = Field(default_factory=list)
    cuisine_types: list[str] = Field(default_factory=list)
    preference_weights: dict[str, int] = Field(default_factory=dict)
    average_budget: int
    max_distance_radius: float
    # Always empty: profiles carry no structured dietary field yet
    dietary_restrictions: list[str] = Field(default_factory=list)
