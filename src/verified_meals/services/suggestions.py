"""Prompt building and parsing of provider meal suggestions."""

import dataclasses
import logging
import re
from dataclasses import dataclass

from pydantic import ValidationError

from verified_meals.domain.errors import SuggestionParseError
from verified_meals.domain.meals import MealRequest
from verified_meals.domain.suggestions import RawSuggestion
from verified_meals.services.macros import correct_macro_targets
from verified_meals.services.providers import SuggestionProviderChain

_FENCE_RE = re.compile(r"```(?:json)?", re.IGNORECASE)

_logger = logging.getLogger(__name__)

_OUTPUT_FORMAT = """OUTPUT FORMAT:
Respond with ONLY valid JSON in this exact structure:

{
  "meal_name": "Descriptive, appealing meal name",
  "foods": [
    {
      "food_name": "Exact food description (e.g., 'Salmon fillet, grilled')",
      "portion_description": "Specific portion with measurement (e.g., '4 oz fillet')",
      "gram_weight": estimated_grams_as_number,
      "calories": estimated_calories_as_number,
      "protein": estimated_protein_grams_as_number,
      "carbs": estimated_carbs_grams_as_number,
      "fat": estimated_fat_grams_as_number
    }
  ],
  "total_nutrition": {
    "calories": total_calories_as_number,
    "protein": total_protein_as_number,
    "carbs": total_carbs_as_number,
    "fat": total_fat_as_number
  },
  "preparation_notes": "Clear, concise cooking/preparation instructions",
  "nutritionist_notes": "Why this meal meets the nutritional requirements"
}

Your entire response must be valid JSON only. No text before or after the JSON."""


def clean_response(text: str) -> str:
    """Strip code fences and surrounding prose, keeping the outer JSON object."""
    cleaned = _FENCE_RE.sub("", text).strip()
    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start != -1 and end > start:
        return cleaned[start : end + 1]
    return cleaned


def parse_suggestion(text: str) -> RawSuggestion:
    """Turn raw provider output into a validated suggestion."""
    cleaned = clean_response(text)
    if not cleaned.startswith("{"):
        raise SuggestionParseError("Response does not contain a JSON object")
    try:
        return RawSuggestion.model_validate_json(cleaned)
    except ValidationError as exc:
        raise SuggestionParseError(f"Invalid meal suggestion: {exc}") from exc


def calorie_context(calories: float) -> str:
    """Short description of what a calorie target amounts to."""
    if calories < 150:
        return "Very small snack portion"
    if calories < 300:
        return "Light snack or small meal"
    if calories < 500:
        return "Moderate meal or substantial snack"
    if calories < 800:
        return "Full meal portion"
    return "Large meal or multiple servings"


def build_prompt(request: MealRequest) -> str:
    """Build the dietitian prompt for one meal.

    The request's targets are used as given; callers correct them first.
    """
    targets = request.targets
    calories = round(targets.calories)
    lines = [
        "You are a professional registered dietitian creating a precise meal plan. "
        "Break the meal down into individual ingredients that exist in the USDA "
        "food database rather than compound dishes.",
        "",
        "STRICT NUTRITIONAL TARGETS:",
        f"- CALORIES: {calories} kcal ({calorie_context(targets.calories)})",
        f"- PROTEIN: {targets.protein_g:.1f}g",
        f"- CARBOHYDRATES: {targets.carbs_g:.1f}g",
        f"- FAT: {targets.fat_g:.1f}g",
    ]
    if targets.fiber_g > 0:
        lines.append(f"- FIBER: {targets.fiber_g:.1f}g")
    lines.append(f"- MEAL TYPE: {request.meal_type.display_name}")
    lines.append(
        f"Total calories must be between {int(targets.calories * 0.95)} and "
        f"{int(targets.calories * 1.05)} kcal."
    )
    if request.dietary_restrictions:
        lines.append(
            f"- Dietary Restrictions: {', '.join(request.dietary_restrictions)}"
        )
    if request.medical_conditions:
        lines.append(f"- Medical Conditions: {', '.join(request.medical_conditions)}")
        lines.append("  These conditions require careful nutritional consideration.")
    if request.cuisine:
        lines.append(f"- Preferred Cuisine Style: {request.cuisine}")
    if request.variety_instructions:
        lines.extend(["", "VARIETY REQUIREMENTS:", request.variety_instructions])
    lines.extend(
        [
            "",
            "REQUIREMENTS:",
            "1. Suggest 3-5 specific foods with realistic portions",
            "2. Use standard household measurements (1 cup, 3 oz, 1 medium)",
            "3. List cooking oils, sauces and seasonings as separate foods",
            "4. Use USDA-style naming: 'Food, type, preparation method'",
            "",
            _OUTPUT_FORMAT,
        ]
    )
    return "\n".join(lines)


@dataclass
class SuggestionService:
    """Produce a validated suggestion for a meal request."""

    chain: SuggestionProviderChain

    async def suggest(self, request: MealRequest) -> tuple[str, RawSuggestion]:
        """Return the winning provider's name and its parsed suggestion."""
        corrected = dataclasses.replace(
            request, targets=correct_macro_targets(request.targets)
        )
        prompt = build_prompt(corrected)
        provider, suggestion = await self.chain.complete(prompt, parse_suggestion)
        _logger.info(
            "Suggestion %r from %s with %s foods",
            suggestion.meal_name,
            provider,
            len(suggestion.foods),
        )
        return provider, suggestion
