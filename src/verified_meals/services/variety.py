"""Variety history and the steering text derived from it."""

from collections.abc import Sequence
from dataclasses import dataclass, field

from verified_meals.domain.meals import VerifiedMeal
from verified_meals.domain.nutrition import NutrientProfile, NutrientTargets, sum_profiles

MAX_AVOIDED_INGREDIENTS = 8
GAP_RATIO = 0.9

_DAY_THEMES = {
    1: "Focus on lean proteins and fresh vegetables.",
    2: "Include healthy grains and legumes.",
    0: "Emphasize omega-3 rich foods and colorful produce.",
}


def base_ingredient_name(name: str) -> str:
    """Leading comma segment of a reference-style name, lowercased."""
    return name.split(",", 1)[0].strip().lower()


@dataclass
class VarietyState:
    """Rolling history of what earlier meals used.

    Meals are recorded as they are produced; queries only look at days up to
    the one being generated.
    """

    _meals: list[tuple[int, VerifiedMeal]] = field(default_factory=list)

    def record_meal(self, day: int, meal: VerifiedMeal) -> None:
        self._meals.append((day, meal))

    def recent_ingredients(self, day: int, window: int) -> list[str]:
        """Base ingredient names from the last ``window`` days and today, newest first."""
        names: list[str] = []
        for meal_day, meal in reversed(self._meals):
            if meal_day > day or meal_day < day - window:
                continue
            for item in meal.ingredients:
                name = base_ingredient_name(item.ingredient.name)
                if name and name not in names:
                    names.append(name)
        return names

    def used_today(self, day: int) -> list[str]:
        return self.recent_ingredients(day, window=0)

    def recent_cuisines(self, day: int, window: int) -> list[str]:
        """Cuisines of the ``window`` days before ``day``."""
        cuisines: list[str] = []
        for meal_day, meal in self._meals:
            if day - window <= meal_day < day and meal.cuisine:
                if meal.cuisine not in cuisines:
                    cuisines.append(meal.cuisine)
        return cuisines

    def daily_totals(self, day: int, window: int) -> list[NutrientProfile]:
        """Nutrient totals of each completed day in the window before ``day``."""
        days = sorted(
            {meal_day for meal_day, _ in self._meals if day - window <= meal_day < day}
        )
        return [
            sum_profiles(
                [meal.totals for meal_day, meal in self._meals if meal_day == past_day]
            )
            for past_day in days
        ]

    def nutrient_gaps(
        self, day: int, window: int, daily_targets: NutrientTargets
    ) -> list[str]:
        """Nutrients whose rolling daily average is below 90% of target."""
        totals = self.daily_totals(day, window)
        if not totals:
            return []
        average = sum_profiles(totals).scaled(1.0 / len(totals))
        pairs = [
            ("calories", average.calories, daily_targets.calories),
            ("protein", average.protein_g, daily_targets.protein_g),
            ("carbs", average.carbs_g, daily_targets.carbs_g),
            ("fat", average.fat_g, daily_targets.fat_g),
            ("fiber", average.fiber_g, daily_targets.fiber_g),
        ]
        pairs.extend(
            (name, average.micronutrients.get(name, 0.0), target)
            for name, target in sorted(daily_targets.micronutrients.items())
        )
        return [
            name
            for name, value, target in pairs
            if target > 0 and value < target * GAP_RATIO
        ]


def pick_cuisine(
    rotation: Sequence[str], day: int, recent: Sequence[str]
) -> str | None:
    """Round-robin from the day's slot, skipping recently used cuisines.

    Returns ``None`` (any cuisine) when every cuisine was used recently.
    """
    if not rotation:
        return None
    used = {cuisine.lower() for cuisine in recent}
    start = (day - 1) % len(rotation)
    for offset in range(len(rotation)):
        cuisine = rotation[(start + offset) % len(rotation)]
        if cuisine.lower() not in used:
            return cuisine
    return None


def build_steering(
    day: int,
    cuisine: str | None,
    avoid: Sequence[str],
    gaps: Sequence[str] = (),
) -> str:
    """Natural-language variety instructions for one meal request."""
    parts: list[str] = []
    if cuisine:
        parts.append(f"Focus on {cuisine} cuisine.")
    if avoid:
        names = ", ".join(avoid[:MAX_AVOIDED_INGREDIENTS])
        parts.append(f"For variety, avoid these recently used ingredients: {names}.")
    if gaps:
        readable = ", ".join(gap.replace("_", " ") for gap in gaps)
        parts.append(
            f"Recent days ran low on {readable}; include foods rich in them."
        )
    parts.append(_DAY_THEMES[day % 3])
    return " ".join(parts)
