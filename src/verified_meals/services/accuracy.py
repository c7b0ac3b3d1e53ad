"""Score actual nutrients against targets with per-nutrient tolerance bands."""

from verified_meals.domain.accuracy import (
    AccuracyReport,
    NutrientBands,
    NutrientEvaluation,
    NutrientStatus,
    NutritionWarning,
    Recommendation,
)
from verified_meals.domain.nutrition import NutrientProfile, NutrientTargets
from verified_meals.services.macros import (
    CARBS_KCAL_PER_G,
    FAT_KCAL_PER_G,
    PROTEIN_KCAL_PER_G,
)

BANDS: dict[str, NutrientBands] = {
    "calories": NutrientBands((0.95, 1.05), (0.85, 1.15)),
    "protein": NutrientBands((0.90, 1.10), (0.80, 1.20)),
    "carbs": NutrientBands((0.90, 1.10), (0.75, 1.25)),
    "fat": NutrientBands((0.85, 1.15), (0.70, 1.30)),
    "fiber": NutrientBands((0.90, 1.50), (0.70, 2.00)),
    "vitamin_c": NutrientBands((0.90, 2.00), (0.70, 3.00)),
    "vitamin_d": NutrientBands((0.90, 1.50), (0.70, 2.00)),
    "vitamin_b12": NutrientBands((0.90, 2.00), (0.70, 3.00)),
    "folate": NutrientBands((0.90, 1.50), (0.70, 2.00)),
    "calcium": NutrientBands((0.90, 1.20), (0.70, 1.50)),
    "iron": NutrientBands((0.90, 1.50), (0.70, 2.00)),
    "potassium": NutrientBands((0.85, 1.15), (0.70, 1.30)),
    # Lower intake is preferred for sodium.
    "sodium": NutrientBands((0.50, 0.90), (0.30, 1.10)),
}

MACRO_WEIGHTS: dict[str, float] = {
    "calories": 0.30,
    "protein": 0.25,
    "carbs": 0.20,
    "fat": 0.15,
    "fiber": 0.10,
}

MACRO_SHARE = 0.60
MICRO_SHARE = 0.40

ADEQUATE_FLOOR = 0.7

SODIUM_WARNING_RATIO = 1.2
PROTEIN_WARNING_RATIO = 0.7
ADDED_SUGARS_LIMIT_G = 50.0

_MACRO_RECOMMENDATIONS: dict[tuple[str, NutrientStatus], Recommendation] = {
    ("calories", NutrientStatus.DEFICIENT): Recommendation(
        nutrient="calories",
        direction="increase",
        priority="high",
        message="Increase calorie intake with nutrient-dense foods",
        suggested_actions=("Add nuts", "Include avocado", "Increase whole grains"),
    ),
    ("calories", NutrientStatus.EXCESSIVE): Recommendation(
        nutrient="calories",
        direction="decrease",
        priority="high",
        message="Reduce calorie intake while keeping nutrient density",
        suggested_actions=(
            "Reduce portions",
            "Choose lower-calorie foods",
            "Add vegetables",
        ),
    ),
    ("protein", NutrientStatus.DEFICIENT): Recommendation(
        nutrient="protein",
        direction="increase",
        priority="high",
        message="Increase high-quality protein sources",
        suggested_actions=("Include legumes", "Add fish", "Consider quinoa"),
    ),
    ("fiber", NutrientStatus.DEFICIENT): Recommendation(
        nutrient="fiber",
        direction="increase",
        priority="medium",
        message="Increase fiber-rich foods",
        suggested_actions=("More vegetables", "Fruit with skin", "Whole grains"),
    ),
}

_MICRO_SOURCES: dict[str, tuple[str, tuple[str, ...]]] = {
    "vitamin_c": (
        "Include more vitamin C rich foods",
        ("Citrus fruit", "Bell peppers", "Broccoli", "Strawberries"),
    ),
    "vitamin_d": (
        "Increase vitamin D foods and sun exposure",
        ("Oily fish", "Eggs", "Sun exposure"),
    ),
    "calcium": (
        "Include more calcium sources",
        ("Dairy", "Leafy greens", "Almonds", "Sardines"),
    ),
    "iron": (
        "Increase iron-rich foods",
        ("Lean meat", "Spinach", "Legumes", "Quinoa"),
    ),
}


def evaluate_nutrient(
    nutrient: str, actual: float, target: float, bands: NutrientBands
) -> NutrientEvaluation:
    """Classify one nutrient and score it in [0, 1]."""
    if target <= 0:
        return NutrientEvaluation(
            nutrient=nutrient,
            actual=actual,
            target=target,
            ratio=0.0,
            status=NutrientStatus.UNKNOWN,
            score=0.0,
        )

    ratio = actual / target
    optimal_low, optimal_high = bands.optimal
    acceptable_low, acceptable_high = bands.acceptable
    if optimal_low <= ratio <= optimal_high:
        status, score = NutrientStatus.OPTIMAL, 1.0
    elif acceptable_low <= ratio <= acceptable_high:
        status = NutrientStatus.ADEQUATE
        if ratio < optimal_low:
            position = (ratio - acceptable_low) / (optimal_low - acceptable_low)
        else:
            position = (acceptable_high - ratio) / (acceptable_high - optimal_high)
        score = ADEQUATE_FLOOR + position * (1.0 - ADEQUATE_FLOOR)
    elif ratio < acceptable_low:
        status = NutrientStatus.DEFICIENT
        score = min(1.0, ADEQUATE_FLOOR * ratio / acceptable_low)
    else:
        status = NutrientStatus.EXCESSIVE
        score = min(1.0, ADEQUATE_FLOOR * acceptable_high / ratio)

    return NutrientEvaluation(
        nutrient=nutrient,
        actual=actual,
        target=target,
        ratio=ratio,
        status=status,
        score=_clamp(score),
    )


def evaluate_accuracy(
    actual: NutrientProfile, targets: NutrientTargets
) -> AccuracyReport:
    """Build the full accuracy report; a pure function of its inputs."""
    macro_values = {
        "calories": (actual.calories, targets.calories),
        "protein": (actual.protein_g, targets.protein_g),
        "carbs": (actual.carbs_g, targets.carbs_g),
        "fat": (actual.fat_g, targets.fat_g),
        "fiber": (actual.fiber_g, targets.fiber_g),
    }
    macronutrients = {
        name: evaluate_nutrient(name, value, target, BANDS[name])
        for name, (value, target) in macro_values.items()
    }
    micronutrients = {
        name: evaluate_nutrient(
            name, actual.micronutrients.get(name, 0.0), target, BANDS[name]
        )
        for name, target in sorted(targets.micronutrients.items())
        if name in BANDS and target > 0
    }

    macro_score = _macro_score(macronutrients)
    micro_score = (
        sum(item.score for item in micronutrients.values()) / len(micronutrients)
        if micronutrients
        else None
    )
    if micro_score is None:
        overall = macro_score
    else:
        overall = MACRO_SHARE * macro_score + MICRO_SHARE * micro_score

    return AccuracyReport(
        overall=_clamp(overall),
        macro_score=macro_score,
        micro_score=micro_score,
        macronutrients=macronutrients,
        micronutrients=micronutrients,
        recommendations=build_recommendations(macronutrients, micronutrients),
        warnings=build_warnings(actual, targets),
    )


def build_recommendations(
    macronutrients: dict[str, NutrientEvaluation],
    micronutrients: dict[str, NutrientEvaluation],
) -> tuple[Recommendation, ...]:
    recommendations = [
        _MACRO_RECOMMENDATIONS[(name, evaluation.status)]
        for name, evaluation in macronutrients.items()
        if (name, evaluation.status) in _MACRO_RECOMMENDATIONS
    ]
    for name, evaluation in micronutrients.items():
        if evaluation.status is not NutrientStatus.DEFICIENT:
            continue
        message, sources = _MICRO_SOURCES.get(
            name,
            (
                f"Include more sources of {name.replace('_', ' ')}",
                ("Varied foods", "Balanced diet"),
            ),
        )
        recommendations.append(
            Recommendation(
                nutrient=name,
                direction="increase",
                priority="medium",
                message=message,
                suggested_actions=sources,
            )
        )
    return tuple(recommendations)


def build_warnings(
    actual: NutrientProfile, targets: NutrientTargets
) -> tuple[NutritionWarning, ...]:
    warnings: list[NutritionWarning] = []
    sodium_target = targets.micronutrients.get("sodium", 0.0)
    sodium = actual.micronutrients.get("sodium", 0.0)
    if sodium_target > 0 and sodium > sodium_target * SODIUM_WARNING_RATIO:
        warnings.append(
            NutritionWarning(
                nutrient="sodium",
                kind="excessive",
                severity="high",
                message="Excess sodium intake can raise cardiovascular risk",
                recommended_action="Reduce processed foods and added salt",
            )
        )
    if targets.protein_g > 0 and actual.protein_g < targets.protein_g * PROTEIN_WARNING_RATIO:
        warnings.append(
            NutritionWarning(
                nutrient="protein",
                kind="deficient",
                severity="medium",
                message="Insufficient protein intake can affect muscle mass",
                recommended_action="Include more complete protein sources",
            )
        )
    if actual.micronutrients.get("added_sugars", 0.0) > ADDED_SUGARS_LIMIT_G:
        warnings.append(
            NutritionWarning(
                nutrient="added_sugars",
                kind="excessive",
                severity="medium",
                message="High added sugar intake",
                recommended_action="Limit sugary drinks and processed sweets",
            )
        )
    return tuple(warnings)


def macro_energy_split(actual: NutrientProfile) -> dict[str, float]:
    """Share of calories from protein, carbs and fat, in percent."""
    energy = {
        "protein": actual.protein_g * PROTEIN_KCAL_PER_G,
        "carbs": actual.carbs_g * CARBS_KCAL_PER_G,
        "fat": actual.fat_g * FAT_KCAL_PER_G,
    }
    total = sum(energy.values())
    if total <= 0:
        return {name: 0.0 for name in energy}
    return {name: value / total * 100.0 for name, value in energy.items()}


def _macro_score(macronutrients: dict[str, NutrientEvaluation]) -> float:
    # Weights are renormalised over the macros that actually have a target.
    weighted = [
        (MACRO_WEIGHTS[name], evaluation.score)
        for name, evaluation in macronutrients.items()
        if evaluation.target > 0
    ]
    total_weight = sum(weight for weight, _ in weighted)
    if total_weight <= 0:
        return 0.0
    return _clamp(sum(weight * score for weight, score in weighted) / total_weight)


def _clamp(value: float) -> float:
    return min(1.0, max(0.0, value))
