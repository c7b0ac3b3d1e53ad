"""Shared test fixtures."""

import json
from collections.abc import Callable
from dataclasses import dataclass, field

import pytest

from verified_meals.adapters.fdc_client import FdcClient
from verified_meals.adapters.template_provider import TemplateProvider
from verified_meals.config import Settings
from verified_meals.containers import AppContainer
from verified_meals.domain.meals import (
    AtomicIngredient,
    MealRequest,
    VerificationStatus,
    VerifiedIngredient,
    VerifiedMeal,
)
from verified_meals.domain.nutrition import NutrientProfile, NutrientTargets
from verified_meals.domain.selection import PendingSelection, SelectionDecision
from verified_meals.services.accuracy import evaluate_accuracy
from verified_meals.services.matching import MatchingEngine
from verified_meals.services.planner import MultiDayPlanner
from verified_meals.services.providers import SuggestionProvider, SuggestionProviderChain
from verified_meals.services.reference import ReferenceLookupService
from verified_meals.services.selection import PendingSelectionQueue, SelectionResolver
from verified_meals.services.suggestions import SuggestionService
from verified_meals.services.verification import MealVerificationService


def fdc_food(
    fdc_id: int,
    description: str,
    calories: float,
    protein: float,
    carbs: float = 0.0,
    fat: float = 0.0,
    data_type: str = "SR Legacy",
) -> dict[str, object]:
    """Search-style FDC food payload with per-100 g values."""
    return {
        "fdcId": fdc_id,
        "description": description,
        "dataType": data_type,
        "foodNutrients": [
            {"nutrientId": 1008, "value": calories},
            {"nutrientId": 1003, "value": protein},
            {"nutrientId": 1005, "value": carbs},
            {"nutrientId": 1004, "value": fat},
        ],
    }


def suggestion_json(
    foods: list[dict[str, object]], meal_name: str = "Test Meal"
) -> str:
    return json.dumps(
        {
            "meal_name": meal_name,
            "foods": foods,
            "preparation_notes": "Cook it.",
            "nutritionist_notes": "Balanced.",
        }
    )


def food_line(
    name: str,
    grams: float = 100.0,
    calories: float = 100.0,
    protein: float = 10.0,
    carbs: float = 10.0,
    fat: float = 2.0,
) -> dict[str, object]:
    return {
        "food_name": name,
        "portion_description": f"{int(grams)}g",
        "gram_weight": grams,
        "calories": calories,
        "protein": protein,
        "carbs": carbs,
        "fat": fat,
    }


def atomic(
    name: str,
    grams: float = 100.0,
    calories: float = 100.0,
    protein: float = 10.0,
) -> AtomicIngredient:
    return AtomicIngredient(
        name=name,
        portion=f"{int(grams)}g",
        grams=grams,
        estimated=NutrientProfile(calories=calories, protein_g=protein),
        parent_name=name,
    )


@dataclass
class FakeProvider(SuggestionProvider):
    """Provider that replays scripted replies or errors."""

    name: str
    replies: list[str | Exception] = field(default_factory=list)
    prompts: list[str] = field(default_factory=list)

    async def generate_completion(self, prompt: str) -> str:
        self.prompts.append(prompt)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


@dataclass
class FakeFdcClient(FdcClient):
    """FDC client answering from an in-memory catalog keyed by query."""

    foods: dict[str, list[dict[str, object]]] = field(default_factory=dict)
    details: dict[int, dict[str, object]] = field(default_factory=dict)
    default: list[dict[str, object]] = field(default_factory=list)
    queries: list[str] = field(default_factory=list)
    detail_calls: list[int] = field(default_factory=list)

    async def search_foods(
        self, query: str, page_size: int = 25
    ) -> dict[str, object]:
        self.queries.append(query)
        return {"foods": self.foods.get(query.lower(), self.default)[:page_size]}

    async def get_food(self, fdc_id: int) -> dict[str, object]:
        self.detail_calls.append(fdc_id)
        return self.details[fdc_id]


@dataclass
class ScriptedResolver(SelectionResolver):
    """Resolver that answers every selection with a scripted decision."""

    decide: Callable[[PendingSelection], SelectionDecision] = lambda selection: (
        SelectionDecision(record=None)
    )
    submitted: list[PendingSelection] = field(default_factory=list)

    async def submit(self, selection: PendingSelection) -> SelectionDecision:
        self.submitted.append(selection)
        return self.decide(selection)


@dataclass
class StubVerifier:
    """Stands in for the meal pipeline; builds a meal from the request."""

    ingredients_by_call: list[list[str]] = field(default_factory=list)
    requests: list[MealRequest] = field(default_factory=list)
    fail_on_call: int | None = None

    async def verify(self, request: MealRequest) -> VerifiedMeal:
        call = len(self.requests)
        self.requests.append(request)
        if self.fail_on_call is not None and call == self.fail_on_call:
            raise RuntimeError("provider exploded")
        names = (
            self.ingredients_by_call[call]
            if call < len(self.ingredients_by_call)
            else [f"Food {call}"]
        )
        share = request.targets.calories / len(names)
        ingredients = [
            VerifiedIngredient(
                ingredient=atomic(name, calories=share),
                record=None,
                nutrients=NutrientProfile(calories=share, protein_g=5.0),
                confidence=0.55,
                status=VerificationStatus.AI_ESTIMATED,
            )
            for name in names
        ]
        totals = NutrientProfile(
            calories=request.targets.calories, protein_g=5.0 * len(names)
        )
        return VerifiedMeal(
            request=request,
            name=f"Meal {call}",
            ingredients=ingredients,
            totals=totals,
            accuracy=evaluate_accuracy(totals, request.targets),
            provider="stub",
        )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        fdc_api_key="fdc-key",
        anthropic_api_key=None,
        openai_api_key=None,
        openrouter_api_key=None,
        operator_token="operator-token",
        provider_order="template",
    )


@pytest.fixture
def daily_targets() -> NutrientTargets:
    return NutrientTargets(calories=2000, protein_g=125, carbs_g=250, fat_g=55.6)


@pytest.fixture
def fdc_client() -> FakeFdcClient:
    return FakeFdcClient()


@pytest.fixture
def container(settings: Settings, fdc_client: FakeFdcClient) -> AppContainer:
    chain = SuggestionProviderChain([TemplateProvider()])
    reference = ReferenceLookupService(fdc_client=fdc_client)
    queue = PendingSelectionQueue(timeout_seconds=5)
    verification_service = MealVerificationService(
        suggestions=SuggestionService(chain),
        reference=reference,
        matching=MatchingEngine.create(resolver=queue),
    )

    def new_planner() -> MultiDayPlanner:
        return MultiDayPlanner(verifier=verification_service)

    async def close_resources() -> None:
        queue.cancel_all()

    return AppContainer(
        settings=settings,
        provider_chain=chain,
        reference_service=reference,
        selection_queue=queue,
        verification_service=verification_service,
        new_planner=new_planner,
        close_resources=close_resources,
    )
