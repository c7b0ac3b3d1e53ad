"""Tests for variety history and steering."""

import asyncio

from tests.conftest import StubVerifier
from verified_meals.domain.meals import MealRequest, MealType, VerifiedMeal
from verified_meals.domain.nutrition import NutrientTargets
from verified_meals.services.variety import (
    VarietyState,
    base_ingredient_name,
    build_steering,
    pick_cuisine,
)

ROTATION = ("Mediterranean", "Mexican", "Asian", "American")


def _meal(names: list[str], cuisine: str | None, calories: float = 2000) -> VerifiedMeal:
    request = MealRequest(
        targets=NutrientTargets(calories=calories, protein_g=0, carbs_g=0, fat_g=0),
        meal_type=MealType.LUNCH,
        cuisine=cuisine,
    )
    return asyncio.run(StubVerifier(ingredients_by_call=[names]).verify(request))


def test_base_ingredient_name() -> None:
    assert base_ingredient_name("Salmon, Atlantic, raw") == "salmon"
    assert base_ingredient_name("Kale") == "kale"


def test_pick_cuisine_round_robin() -> None:
    assert pick_cuisine(ROTATION, 1, []) == "Mediterranean"
    assert pick_cuisine(ROTATION, 2, []) == "Mexican"
    assert pick_cuisine(ROTATION, 5, []) == "Mediterranean"


def test_pick_cuisine_skips_recent_ones() -> None:
    assert pick_cuisine(ROTATION, 2, ["mexican"]) == "Asian"
    assert pick_cuisine(ROTATION, 4, ["American", "Mediterranean"]) == "Mexican"


def test_pick_cuisine_returns_none_when_exhausted() -> None:
    assert pick_cuisine(ROTATION[:2], 1, ["Mediterranean", "Mexican"]) is None
    assert pick_cuisine((), 1, []) is None


def test_pick_cuisine_never_repeats_within_lookback() -> None:
    lookback = 2
    history: list[str | None] = []
    for day in range(1, 15):
        recent = [cuisine for cuisine in history[-lookback:] if cuisine]
        picked = pick_cuisine(ROTATION, day, recent)
        assert picked is not None
        assert picked not in recent
        history.append(picked)


def test_build_steering_full() -> None:
    text = build_steering(1, "Asian", ["salmon", "quinoa"], ["vitamin_d"])

    assert text == (
        "Focus on Asian cuisine. "
        "For variety, avoid these recently used ingredients: salmon, quinoa. "
        "Recent days ran low on vitamin d; include foods rich in them. "
        "Focus on lean proteins and fresh vegetables."
    )


def test_build_steering_caps_avoid_list_and_rotates_theme() -> None:
    avoid = [f"food{index}" for index in range(12)]

    text = build_steering(3, None, avoid)

    assert "food7" in text
    assert "food8" not in text
    assert "cuisine" not in text
    assert text.endswith("Emphasize omega-3 rich foods and colorful produce.")
    assert build_steering(2, None, []) == "Include healthy grains and legumes."


def test_variety_state_windows() -> None:
    state = VarietyState()
    state.record_meal(1, _meal(["Salmon, raw"], "Mediterranean"))
    state.record_meal(2, _meal(["Quinoa, cooked", "Salmon, raw"], "Mexican"))
    state.record_meal(3, _meal(["Kale"], "Asian"))

    assert state.recent_ingredients(3, 1) == ["kale", "quinoa", "salmon"]
    assert state.recent_ingredients(3, 0) == ["kale"]
    assert state.used_today(2) == ["quinoa", "salmon"]
    assert state.recent_cuisines(3, 2) == ["Mediterranean", "Mexican"]
    assert state.recent_cuisines(3, 1) == ["Mexican"]
    assert state.recent_cuisines(1, 2) == []


def test_nutrient_gaps_use_completed_days_average() -> None:
    state = VarietyState()
    state.record_meal(1, _meal(["Rice"], None, calories=2000))
    state.record_meal(2, _meal(["Rice"], None, calories=1200))
    targets = NutrientTargets(calories=2000, protein_g=5, carbs_g=0, fat_g=0)

    assert state.nutrient_gaps(1, 3, targets) == []
    assert state.nutrient_gaps(2, 3, targets) == []
    assert state.nutrient_gaps(3, 3, targets) == ["calories"]
    assert len(state.daily_totals(3, 3)) == 2
