"""
Preference aggregation tests.
"""

from decimal import Decimal
from uuid import uuid4

import pytest

from eventflow.engine.aggregation import aggregate_profiles
from eventflow.models import PreferenceProfile


def _profile(cuisines=None, budget=None, radius=None) -> PreferenceProfile:
    return PreferenceProfile(
        user_id=uuid4(),
        cuisine_preferences=cuisines,
        budget_preference=budget,
        distance_radius=radius,
    )


def test_cuisines_ranked_by_frequency():
    profiles = [_profile("italian, thai"), _profile("thai")]

    result = aggregate_profiles([p.user_id for p in profiles], profiles)

    assert result.cuisine_types == ["thai", "italian"]
    assert result.preference_weights == {"thai": 2, "italian": 1}


def test_cuisine_ties_keep_first_seen_order():
    profiles = [_profile("korean,mexican"), _profile("mexican, korean, ,")]

    result = aggregate_profiles([], profiles)

    assert result.cuisine_types == ["korean", "mexican"]
    assert result.preference_weights == {"korean": 2, "mexican": 2}


def test_budget_is_truncated_mean():
    profiles = [_profile(budget=Decimal("20")), _profile(budget=Decimal("40"))]
    assert aggregate_profiles([], profiles).average_budget == 30

    profiles = [_profile(budget=Decimal("25")), _profile(budget=Decimal("30"))]
    assert aggregate_profiles([], profiles).average_budget == 27


def test_missing_budgets_are_ignored():
    profiles = [_profile(budget=Decimal("50")), _profile()]

    assert aggregate_profiles([], profiles).average_budget == 50


def test_defaults_without_data():
    result = aggregate_profiles([], [])

    assert result.cuisine_types == []
    assert result.preference_weights == {}
    assert result.average_budget == 30
    assert result.max_distance_radius == 10.0
    assert result.dietary_restrictions == []


def test_radius_is_maximum():
    profiles = [_profile(radius=3.5), _profile(radius=12.0), _profile()]

    assert aggregate_profiles([], profiles).max_distance_radius == 12.0


def test_dietary_restrictions_always_empty():
    profile = PreferenceProfile(user_id=uuid4(), dietary_restrictions="vegan")

    assert aggregate_profiles([profile.user_id], [profile]).dietary_restrictions == []


@pytest.mark.asyncio
async def test_aggregate_reads_accepted_participants(planning_engine, make_event):
    event = make_event()
    users = [uuid4(), uuid4(), uuid4()]
    planning_engine.events.get.return_value = event
    planning_engine.participants.get_accepted_user_ids.return_value = users
    # Third participant has no stored profile
    planning_engine.aggregator.preferences.get_by_user_ids.return_value = [
        PreferenceProfile(user_id=users[0], cuisine_preferences="sushi", budget_preference=40),
        PreferenceProfile(user_id=users[1], cuisine_preferences="sushi, ramen", distance_radius=4),
    ]

    result = await planning_engine.aggregate_preferences(event.event_id)

    assert result.participant_ids == users
    assert result.cuisine_types == ["sushi", "ramen"]
    assert result.average_budget == 40
    assert result.max_distance_radius == 4
    planning_engine.aggregator.preferences.get_by_user_ids.assert_awaited_once_with(users)
