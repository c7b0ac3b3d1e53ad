"""Per-meal pipeline: suggest, decompose, match, score."""

import logging
from dataclasses import dataclass, field

from verified_meals.domain.accuracy import AccuracyReport
from verified_meals.domain.meals import MealRequest, VerifiedIngredient, VerifiedMeal
from verified_meals.domain.nutrition import sum_profiles
from verified_meals.services.accuracy import evaluate_accuracy
from verified_meals.services.decomposer import IngredientDecomposer
from verified_meals.services.macros import correct_macro_targets
from verified_meals.services.matching import MatchingEngine
from verified_meals.services.reference import ReferenceLookupService
from verified_meals.services.suggestions import SuggestionService

ADJUST_PORTIONS_BELOW = 0.8

_logger = logging.getLogger(__name__)


@dataclass
class MealVerificationService:
    """Turn one meal request into a verified, scored meal."""

    suggestions: SuggestionService
    reference: ReferenceLookupService
    matching: MatchingEngine
    decomposer: IngredientDecomposer = field(default_factory=IngredientDecomposer)

    async def verify(self, request: MealRequest) -> VerifiedMeal:
        provider, suggestion = await self.suggestions.suggest(request)
        # Records are cached for this meal only.
        reference = self.reference.scoped()

        ingredients: list[VerifiedIngredient] = []
        for food in suggestion.foods:
            for atomic in self.decomposer.decompose(food):
                ingredients.append(await self.matching.match(atomic, reference))

        totals = sum_profiles([item.nutrients for item in ingredients])
        targets = correct_macro_targets(request.targets)
        accuracy = evaluate_accuracy(totals, targets)
        meal = VerifiedMeal(
            request=request,
            name=suggestion.meal_name,
            ingredients=ingredients,
            totals=totals,
            accuracy=accuracy,
            provider=provider,
            preparation_notes=suggestion.preparation_notes,
            nutritionist_notes=suggestion.nutritionist_notes,
            verification_notes=verification_notes(ingredients, accuracy),
        )
        _logger.info(
            "Verified %r: %s/%s ingredients matched, accuracy %.2f",
            meal.name,
            meal.verified_count,
            len(ingredients),
            accuracy.overall,
        )
        return meal


def verification_notes(
    ingredients: list[VerifiedIngredient], accuracy: AccuracyReport
) -> str:
    """Human-readable audit summary of a verified meal."""
    verified = sum(1 for item in ingredients if item.is_verified)
    lines = [
        "Reference verification results:",
        f"- {verified}/{len(ingredients)} foods verified with the reference database",
        f"- Overall accuracy: {accuracy.overall * 100:.1f}%",
    ]
    if accuracy.overall < ADJUST_PORTIONS_BELOW:
        lines.append("- Consider adjusting portions for better target matching")
    for item in ingredients:
        if not item.is_verified:
            lines.append(f"- Could not verify: {item.ingredient.name}")
    return "\n".join(lines)
