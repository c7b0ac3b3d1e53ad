"""Accuracy report models."""

from dataclasses import dataclass
from enum import Enum


class NutrientStatus(str, Enum):
    """Position of an actual amount relative to its target bands."""

    OPTIMAL = "optimal"
    ADEQUATE = "adequate"
    DEFICIENT = "deficient"
    EXCESSIVE = "excessive"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class NutrientBands:
    """Optimal and acceptable ratio bands for a nutrient."""

    optimal: tuple[float, float]
    acceptable: tuple[float, float]


@dataclass(frozen=True)
class NutrientEvaluation:
    """Status and score for a single nutrient."""

    nutrient: str
    actual: float
    target: float
    ratio: float
    status: NutrientStatus
    score: float


@dataclass(frozen=True)
class Recommendation:
    """Suggested dietary adjustment."""

    nutrient: str
    direction: str
    priority: str
    message: str
    suggested_actions: tuple[str, ...] = ()


@dataclass(frozen=True)
class NutritionWarning:
    """Threshold breach worth surfacing to a clinician."""

    nutrient: str
    kind: str
    severity: str
    message: str
    recommended_action: str


@dataclass(frozen=True)
class AccuracyReport:
    """Per-nutrient and overall accuracy of actual versus target nutrients."""

    overall: float
    macro_score: float
    micro_score: float | None
    macronutrients: dict[str, NutrientEvaluation]
    micronutrients: dict[str, NutrientEvaluation]
    recommendations: tuple[Recommendation, ...] = ()
    warnings: tuple[NutritionWarning, ...] = ()

    @property
    def grade(self) -> str:
        for threshold, letter in _GRADES:
            if self.overall >= threshold:
                return letter
        return "C"


_GRADES = (
    (0.95, "A+"),
    (0.90, "A"),
    (0.85, "B+"),
    (0.80, "B"),
    (0.75, "C+"),
)
