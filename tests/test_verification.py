"""Tests for the per-meal verification pipeline."""

import asyncio

import pytest

from tests.conftest import (
    FakeFdcClient,
    FakeProvider,
    ScriptedResolver,
    fdc_food,
    food_line,
    suggestion_json,
)
from verified_meals.domain.errors import AllProvidersUnavailableError, ProviderServerError
from verified_meals.domain.meals import MealRequest, MealType, VerificationStatus
from verified_meals.domain.nutrition import NutrientTargets
from verified_meals.services.matching import MatchingEngine
from verified_meals.services.providers import SuggestionProviderChain
from verified_meals.services.reference import ReferenceLookupService
from verified_meals.services.suggestions import SuggestionService
from verified_meals.services.verification import MealVerificationService

_REQUEST = MealRequest(
    targets=NutrientTargets(calories=300, protein_g=35, carbs_g=10, fat_g=8),
    meal_type=MealType.LUNCH,
    cuisine="American",
)

_REPLY = suggestion_json(
    [
        food_line("Chicken breast", grams=150, calories=247.5, protein=46.5),
        food_line("Chicken breast", grams=50, calories=82.5, protein=15.5),
        food_line("Mystery sauce", grams=30, calories=40, protein=0, carbs=5, fat=2),
    ],
    meal_name="Chicken Plate",
)


def _service(
    replies: list[str | Exception], client: FakeFdcClient
) -> MealVerificationService:
    return MealVerificationService(
        suggestions=SuggestionService(
            SuggestionProviderChain([FakeProvider(name="fake", replies=replies)])
        ),
        reference=ReferenceLookupService(fdc_client=client),
        matching=MatchingEngine.create(resolver=ScriptedResolver()),
    )


def _client() -> FakeFdcClient:
    return FakeFdcClient(
        foods={"chicken breast": [fdc_food(10, "Chicken breast", 165, 31)]}
    )


def test_totals_are_the_sum_of_verified_ingredients() -> None:
    meal = asyncio.run(_service([_REPLY], _client()).verify(_REQUEST))

    assert meal.name == "Chicken Plate"
    assert meal.provider == "fake"
    assert meal.cuisine == "American"
    assert [item.status for item in meal.ingredients] == [
        VerificationStatus.AUTO_MATCHED,
        VerificationStatus.AUTO_MATCHED,
        VerificationStatus.AI_ESTIMATED,
    ]
    assert meal.verified_count == 2
    assert meal.totals.calories == pytest.approx(247.5 + 82.5 + 40)
    assert meal.totals.protein_g == pytest.approx(46.5 + 15.5)
    assert meal.totals.fat_g == pytest.approx(2)
    assert meal.accuracy.macronutrients["calories"].actual == pytest.approx(370)
    assert meal.preparation_notes == "Cook it."


def test_verification_notes_summarize_the_audit() -> None:
    meal = asyncio.run(_service([_REPLY], _client()).verify(_REQUEST))

    lines = meal.verification_notes.splitlines()
    assert lines[0] == "Reference verification results:"
    assert lines[1] == "- 2/3 foods verified with the reference database"
    assert lines[2].startswith("- Overall accuracy: ")
    assert lines[-1] == "- Could not verify: Mystery sauce"


def test_reference_cache_lives_for_one_meal() -> None:
    client = _client()
    service = _service([_REPLY, _REPLY], client)

    asyncio.run(service.verify(_REQUEST))
    assert client.queries == ["Chicken breast", "Mystery sauce"]

    asyncio.run(service.verify(_REQUEST))
    assert client.queries.count("Chicken breast") == 2
    assert len(service.reference.cache) == 0


def test_provider_failure_propagates() -> None:
    service = _service([ProviderServerError(500)], _client())

    with pytest.raises(AllProvidersUnavailableError):
        asyncio.run(service.verify(_REQUEST))
