"""Venue recommendation selection and ranking."""

import json
import logging
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy.ext.asyncio import AsyncSession

from eventflow.config import settings
from eventflow.db.repositories import (
    EventRepository,
    LocationRepository,
    ParticipantRepository,
    RecommendationRepository,
    VenueRepository,
)
from eventflow.engine.errors import EventNotFound
from eventflow.engine.scoring import DefaultVenueScorer, VenueScorer
from eventflow.models import (
    AggregatedPreferences,
    EventPlaceOption,
    GeoPoint,
    Venue,
    VenueScore,
)
from eventflow.utils.time import utc_now

logger = logging.getLogger(__name__)


def rank_scored(
    scored: list[tuple[Venue, VenueScore]],
    floor: float,
    limit: int,
) -> list[tuple[Venue, VenueScore]]:
    """Drop scores at or below ``floor``, best first, keep ``limit``. Ties keep input order."""
    kept = [pair for pair in scored if pair[1].score > floor]
    kept.sort(key=lambda pair: pair[1].score, reverse=True)
    return kept[:limit]


class RecommendationSelector:
    """Turns a consensus preference profile into persisted venue options."""

    def __init__(self, session: AsyncSession, scorer: Optional[VenueScorer] = None):
        self.session = session
        self.scorer = scorer or DefaultVenueScorer()
        self.events = EventRepository(session)
        self.participants = ParticipantRepository(session)
        self.locations = LocationRepository(session)
        self.venues = VenueRepository(session)
        self.options = RecommendationRepository(session)

    async def _candidate_venues(self, preferences: AggregatedPreferences) -> list[Venue]:
        candidates = await self.venues.list_candidates(
            categories=preferences.cuisine_types or None,
            limit=settings.candidate_limit,
        )
        if candidates:
            return candidates

        logger.info("No venues matched the preferred cuisines, falling back to top rated")
        return await self.venues.list_top_rated(limit=settings.fallback_candidate_limit)

    async def generate_recommendations(
        self,
        event_id: UUID,
        preferences: AggregatedPreferences,
        search_location: Optional[GeoPoint] = None,
    ) -> list[EventPlaceOption]:
        """
        Score candidate venues and persist the best as recommendation records.

        Raises EventNotFound if the event does not exist. An empty list is a
        valid outcome: nothing scored above the acceptance floor.

        Args:
            event_id: Event to recommend for
            preferences: Consensus profile from the aggregator
            search_location: Reference point that replaces the participants'
                own coordinates when scoring distance

        Returns:
            Created options, best score first
        """
        event = await self.events.get(event_id)
        if not event:
            raise EventNotFound(str(event_id))

        if search_location is not None:
            locations = [search_location]
        else:
            user_ids = await self.participants.get_accepted_user_ids(event_id)
            locations = await self.locations.get_by_user_ids(user_ids)

        candidates = await self._candidate_venues(preferences)
        scored = [
            (venue, self.scorer.score(venue, preferences, event, locations))
            for venue in candidates
        ]
        ranked = rank_scored(
            scored,
            floor=settings.recommendation_score_floor,
            limit=settings.recommendation_limit,
        )

        created = []
        for venue, verdict in ranked:
            option = EventPlaceOption(
                option_id=uuid4(),
                event_id=event_id,
                venue_id=venue.venue_id,
                suggested_by="AI",
                ai_score=verdict.score,
                ai_reasoning=verdict.reasoning,
                pros=json.dumps(verdict.pros),
                cons=json.dumps(verdict.cons),
                estimated_cost_per_person=venue.price_level,
                added_at=utc_now(),
            )
            created.append(await self.options.create(option))

        logger.info(
            f"Generated {len(created)} recommendations for event {event_id} "
            f"from {len(candidates)} candidates"
        )
        return created
