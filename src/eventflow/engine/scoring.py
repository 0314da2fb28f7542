"""Venue scoring strategies.

The recommendation pipeline only relies on the :class:`VenueScorer`
contract. :class:`DefaultVenueScorer` is the scorer wired in by default and
can be swapped for any object with the same ``score`` method.
"""

import math
from typing import Protocol, Sequence

from eventflow.models import (
    AggregatedPreferences,
    Event,
    GeoPoint,
    Venue,
    VenueScore,
    VerificationStatus,
)

EARTH_RADIUS_KM = 6371.0


class VenueScorer(Protocol):
    """Scores one venue for an event. Synchronous and side-effect free."""

    def score(
        self,
        venue: Venue,
        preferences: AggregatedPreferences,
        event: Event,
        locations: Sequence[GeoPoint],
    ) -> VenueScore: ...


def haversine_km(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance between two points."""
    lat1, lon1, lat2, lon2 = map(
        math.radians, (a.latitude, a.longitude, b.latitude, b.longitude)
    )
    h = (
        math.sin((lat2 - lat1) / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin((lon2 - lon1) / 2) ** 2
    )
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(h))


class DefaultVenueScorer:
    """
    Weighted 0-100 score.

    Weights: cuisine popularity 25, budget fit 20, capacity fit 20,
    average distance 15, rating and review volume 15, moderation 5.
    Missing venue data earns a small flat credit instead of zero.
    """

    def score(
        self,
        venue: Venue,
        preferences: AggregatedPreferences,
        event: Event,
        locations: Sequence[GeoPoint],
    ) -> VenueScore:
        pros: list[str] = []
        cons: list[str] = []
        total = 0.0

        # Cuisine
        headcount = max(len(preferences.participant_ids), 1)
        if venue.category and venue.category in preferences.cuisine_types:
            share = preferences.preference_weights.get(venue.category, 0) / headcount
            total += 25 * min(share * 2, 1.0)
            pros.append(f"{share:.0%} of the group prefer {venue.category}")
        elif venue.category:
            total += 5
            if preferences.cuisine_types:
                cons.append(f"{venue.category} is not among the group's preferred cuisines")

        # Budget
        if venue.price_level is not None:
            diff = abs(float(venue.price_level) - preferences.average_budget)
            total += 20 * (1 - min(diff / 20.0, 1.0))
            if diff < 10:
                pros.append(f"Price matches the group budget (~{preferences.average_budget}/person)")
            elif float(venue.price_level) > preferences.average_budget:
                cons.append("Above the group's average budget")
        else:
            total += 5

        # Capacity
        if venue.capacity is not None:
            expected = event.expected_attendees
            if venue.capacity >= expected:
                ideal = expected * 1.2
                total += 20 if venue.capacity <= ideal else 20 * (0.7 + 0.3 * ideal / venue.capacity)
                pros.append(f"Fits a group of {expected}")
            else:
                total += 20 * max(venue.capacity / expected - 0.3, 0)
                cons.append(f"Seats {venue.capacity}, fewer than the {expected} expected")
        else:
            total += 5

        # Distance
        if locations:
            here = GeoPoint(latitude=venue.latitude, longitude=venue.longitude)
            average = sum(haversine_km(here, p) for p in locations) / len(locations)
            radius = preferences.max_distance_radius
            if radius > 0 and average <= radius:
                total += 15 * (1 - average / radius) ** 1.5
                pros.append(f"About {average:.1f} km from the group on average")
            else:
                cons.append(f"Outside the preferred {radius:g} km radius")
        else:
            total += 7.5

        # Rating
        if venue.average_rating > 0:
            total += 10 * venue.average_rating / 5.0
            total += _review_bonus(venue.total_reviews)
            if venue.average_rating >= 4.0:
                pros.append(
                    f"Rated {venue.average_rating:.1f}/5 from {venue.total_reviews} reviews"
                )
        else:
            total += 2
            cons.append("No ratings yet")

        if venue.verification_status == VerificationStatus.APPROVED:
            total += 5

        reasoning = ", ".join(pros) if pros else "Good match for your event"
        return VenueScore(score=min(total, 100.0), reasoning=reasoning, pros=pros, cons=cons)


def _review_bonus(total_reviews: int) -> int:
    for floor, bonus in ((100, 5), (50, 4), (20, 3), (10, 2), (5, 1)):
        if total_reviews >= floor:
            return bonus
    return 0
