"""Preference aggregation - merge accepted participants into one profile."""

import logging
from collections import Counter
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from eventflow.config import settings
from eventflow.db.repositories import ParticipantRepository, PreferenceRepository
from eventflow.models import AggregatedPreferences, PreferenceProfile

logger = logging.getLogger(__name__)


def aggregate_profiles(
    participant_ids: list[UUID],
    profiles: list[PreferenceProfile],
) -> AggregatedPreferences:
    """Reduce individual profiles to a consensus profile. Pure."""
    cuisine_counts = Counter(tag for profile in profiles for tag in profile.cuisine_tags())
    # most_common keeps first-seen order among equal counts
    cuisine_types = [tag for tag, _ in cuisine_counts.most_common()]

    budgets = [p.budget_preference for p in profiles if p.budget_preference is not None]
    if budgets:
        average_budget = int(sum(budgets) / len(budgets))
    else:
        average_budget = settings.default_budget_per_person

    radii = [p.distance_radius for p in profiles if p.distance_radius is not None]
    max_radius = max(radii) if radii else settings.default_distance_radius_km

    return AggregatedPreferences(
        participant_ids=participant_ids,
        cuisine_types=cuisine_types,
        preference_weights=dict(cuisine_counts),
        average_budget=average_budget,
        max_distance_radius=max_radius,
        dietary_restrictions=[],
    )


class PreferenceAggregator:
    """Builds an event's consensus preference profile from storage."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.participants = ParticipantRepository(session)
        self.preferences = PreferenceRepository(session)

    async def aggregate(self, event_id: UUID) -> AggregatedPreferences:
        """Aggregate the accepted participants' preferences. Persists nothing."""
        participant_ids = await self.participants.get_accepted_user_ids(event_id)
        profiles = await self.preferences.get_by_user_ids(participant_ids)

        aggregated = aggregate_profiles(participant_ids, profiles)
        logger.debug(
            f"Aggregated {len(profiles)} profiles for event {event_id}: "
            f"cuisines={aggregated.cuisine_types}, budget={aggregated.average_budget}"
        )
        return aggregated
