"""Macro target correction and meal-type splits."""

import logging

from verified_meals.domain.meals import MealType
from verified_meals.domain.nutrition import NutrientTargets

PROTEIN_KCAL_PER_G = 4.0
CARBS_KCAL_PER_G = 4.0
FAT_KCAL_PER_G = 9.0

MIN_MACRO_RATIO = 0.5
MAX_MACRO_RATIO = 1.5

# Share of calories used when macros are rebuilt from the calorie target.
FALLBACK_PROTEIN_SHARE = 0.25
FALLBACK_CARBS_SHARE = 0.50
FALLBACK_FAT_SHARE = 0.25

_logger = logging.getLogger(__name__)


def implied_calories(protein_g: float, carbs_g: float, fat_g: float) -> float:
    """Calories implied by macro grams."""
    return (
        protein_g * PROTEIN_KCAL_PER_G
        + carbs_g * CARBS_KCAL_PER_G
        + fat_g * FAT_KCAL_PER_G
    )


def correct_macro_targets(targets: NutrientTargets) -> NutrientTargets:
    """Rebuild macros from calories when they disagree too much with them.

    Targets whose macro-implied calories fall outside 50-150% of the stated
    calories get a 25/50/25 protein/carbs/fat split of the calorie target.
    A non-positive calorie target is returned unchanged.
    """
    if targets.calories <= 0:
        return targets

    implied = implied_calories(targets.protein_g, targets.carbs_g, targets.fat_g)
    ratio = implied / targets.calories
    if MIN_MACRO_RATIO <= ratio <= MAX_MACRO_RATIO:
        return targets

    _logger.info(
        "Correcting macro targets: %.0f kcal stated, %.0f kcal implied (ratio %.2f)",
        targets.calories,
        implied,
        ratio,
    )
    return NutrientTargets(
        calories=targets.calories,
        protein_g=targets.calories * FALLBACK_PROTEIN_SHARE / PROTEIN_KCAL_PER_G,
        carbs_g=targets.calories * FALLBACK_CARBS_SHARE / CARBS_KCAL_PER_G,
        fat_g=targets.calories * FALLBACK_FAT_SHARE / FAT_KCAL_PER_G,
        fiber_g=targets.fiber_g,
        micronutrients=dict(targets.micronutrients),
    )


def split_for_meal(daily: NutrientTargets, meal_type: MealType) -> NutrientTargets:
    """Apply the fixed meal-type share to every daily target."""
    return daily.scaled(meal_type.calorie_share)
