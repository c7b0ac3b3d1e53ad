"""Split compound food descriptions into searchable atomic ingredients."""

import logging
from dataclasses import dataclass, field

from verified_meals.domain.meals import AtomicIngredient
from verified_meals.domain.nutrition import NutrientProfile
from verified_meals.domain.suggestions import SuggestedFood
from verified_meals.services.matching import mentions_word

OIL_NAME = "Oil, olive, salad or cooking"

# Marker -> whether it implies an oil-based cooking medium. Checked in order.
COMPOUND_PATTERNS: tuple[tuple[str, bool], ...] = (
    ("sautéed in", True),
    ("sauteed in", True),
    ("cooked with", True),
    ("grilled with", True),
    ("mixed with", False),
    ("served with", False),
)

COMPOUND_INDICATORS: tuple[str, ...] = (
    "sautéed",
    "sauteed",
    "grilled",
    "cooked in",
    "with oil",
    "in sauce",
    "mixed",
    "seasoned",
    "marinated",
    "dressed",
    "topped with",
)

COOKING_METHODS: tuple[str, ...] = (
    "sautéed",
    "sauteed",
    "grilled",
    "baked",
    "fried",
    "steamed",
    "boiled",
    "roasted",
)

OIL_METHODS = frozenset({"sautéed", "sauteed", "fried"})

KNOWN_STAPLES: tuple[str, ...] = (
    "chicken",
    "salmon",
    "spinach",
    "broccoli",
    "rice",
    "quinoa",
    "beef",
    "turkey",
    "cod",
    "tuna",
)

ADDITION_KEYWORDS: tuple[tuple[str, str], ...] = (
    ("olive oil", OIL_NAME),
    ("garlic", "Garlic, raw"),
    ("herbs", "Herbs, fresh, mixed"),
    ("lemon", "Lemon juice, raw"),
)


@dataclass(frozen=True)
class DecompositionWeights:
    """Fixed proportions used to split a compound food."""

    pattern_base_weight: float = 0.85
    pattern_base_calories: float = 0.8
    pattern_base_protein: float = 0.9
    pattern_base_carbs: float = 0.9
    pattern_base_fat: float = 0.3
    pattern_oil_weight: float = 0.15
    pattern_oil_calories: float = 0.2
    pattern_oil_fat: float = 0.7
    indicator_base_weight: float = 0.8
    indicator_base_calories: float = 0.8
    indicator_base_protein: float = 0.8
    indicator_base_carbs: float = 0.8
    indicator_base_fat: float = 0.3
    indicator_oil_weight: float = 0.2
    indicator_oil_calories: float = 0.2
    indicator_oil_fat: float = 0.7
    addition_weight: float = 0.1
    addition_estimate: NutrientProfile = field(
        default_factory=lambda: NutrientProfile(calories=10.0, carbs_g=2.0)
    )


_logger = logging.getLogger(__name__)


@dataclass
class IngredientDecomposer:
    """Heuristic splitter producing terms the reference database can match."""

    weights: DecompositionWeights = field(default_factory=DecompositionWeights)

    def decompose(self, food: SuggestedFood) -> list[AtomicIngredient]:
        """Return one atomic ingredient, or several for a compound food."""
        lowered = food.food_name.lower()
        for pattern, uses_oil in COMPOUND_PATTERNS:
            if pattern in lowered:
                parts = self._split_by_pattern(food, lowered, pattern, uses_oil)
                if parts:
                    _logger.debug(
                        "Decomposed %r by pattern %r into %s parts",
                        food.food_name,
                        pattern,
                        len(parts),
                    )
                    return parts

        if any(indicator in lowered for indicator in COMPOUND_INDICATORS):
            parts = self._split_by_indicator(food, lowered)
            _logger.debug(
                "Decomposed %r by indicator into %s parts", food.food_name, len(parts)
            )
            return parts

        return [
            AtomicIngredient(
                name=food.food_name,
                portion=food.portion_description,
                grams=food.gram_weight,
                estimated=food.estimated_nutrients(),
                parent_name=food.food_name,
            )
        ]

    def _split_by_pattern(
        self, food: SuggestedFood, lowered: str, pattern: str, uses_oil: bool
    ) -> list[AtomicIngredient]:
        base_name = lowered.split(pattern, 1)[0].strip(" ,")
        if not base_name:
            return []
        w = self.weights
        estimate = food.estimated_nutrients()
        parts = [
            _part(
                food,
                base_name.title(),
                food.gram_weight * w.pattern_base_weight,
                NutrientProfile(
                    calories=estimate.calories * w.pattern_base_calories,
                    protein_g=estimate.protein_g * w.pattern_base_protein,
                    carbs_g=estimate.carbs_g * w.pattern_base_carbs,
                    fat_g=estimate.fat_g * w.pattern_base_fat,
                ),
            )
        ]
        if uses_oil:
            parts.append(
                _part(
                    food,
                    OIL_NAME,
                    food.gram_weight * w.pattern_oil_weight,
                    NutrientProfile(
                        calories=estimate.calories * w.pattern_oil_calories,
                        fat_g=estimate.fat_g * w.pattern_oil_fat,
                    ),
                )
            )
        return parts

    def _split_by_indicator(
        self, food: SuggestedFood, lowered: str
    ) -> list[AtomicIngredient]:
        w = self.weights
        estimate = food.estimated_nutrients()
        parts = [
            _part(
                food,
                extract_base_ingredient(lowered),
                food.gram_weight * w.indicator_base_weight,
                NutrientProfile(
                    calories=estimate.calories * w.indicator_base_calories,
                    protein_g=estimate.protein_g * w.indicator_base_protein,
                    carbs_g=estimate.carbs_g * w.indicator_base_carbs,
                    fat_g=estimate.fat_g * w.indicator_base_fat,
                ),
            )
        ]
        if extract_cooking_method(lowered) in OIL_METHODS:
            parts.append(
                _part(
                    food,
                    OIL_NAME,
                    food.gram_weight * w.indicator_oil_weight,
                    NutrientProfile(
                        calories=estimate.calories * w.indicator_oil_calories,
                        fat_g=estimate.fat_g * w.indicator_oil_fat,
                    ),
                )
            )
        present = {part.name for part in parts}
        for addition in extract_additions(lowered):
            if addition in present:
                continue
            parts.append(
                _part(
                    food,
                    addition,
                    food.gram_weight * w.addition_weight,
                    w.addition_estimate,
                )
            )
        return parts


def extract_base_ingredient(lowered: str) -> str:
    """Known staple as a raw reference term, else the first comma segment."""
    for staple in KNOWN_STAPLES:
        if mentions_word(lowered, staple):
            return f"{staple.capitalize()}, raw"
    return lowered.split(",", 1)[0].strip().title()


def extract_cooking_method(lowered: str) -> str:
    for method in COOKING_METHODS:
        if method in lowered:
            return method
    return "cooked"


def extract_additions(lowered: str) -> list[str]:
    return [name for keyword, name in ADDITION_KEYWORDS if keyword in lowered]


def _part(
    food: SuggestedFood, name: str, grams: float, estimated: NutrientProfile
) -> AtomicIngredient:
    return AtomicIngredient(
        name=name,
        portion=f"{int(grams)}g",
        grams=grams,
        estimated=estimated,
        parent_name=food.food_name,
        is_compound_part=True,
    )
