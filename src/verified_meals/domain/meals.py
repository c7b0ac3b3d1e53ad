"""Domain models for meal requests and verified meals."""

from dataclasses import dataclass, field
from enum import Enum
from uuid import UUID, uuid4

from verified_meals.domain.accuracy import AccuracyReport
from verified_meals.domain.nutrition import (
    NutrientProfile,
    NutrientTargets,
    ReferenceRecord,
)


class MealType(str, Enum):
    """Meal slots within a day."""

    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACK = "snack"

    @property
    def calorie_share(self) -> float:
        return _MEAL_SHARES[self]

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


_MEAL_SHARES = {
    MealType.BREAKFAST: 0.25,
    MealType.LUNCH: 0.35,
    MealType.DINNER: 0.35,
    MealType.SNACK: 0.05,
}


@dataclass(frozen=True)
class MealRequest:
    """Everything a provider needs to suggest one meal."""

    targets: NutrientTargets
    meal_type: MealType
    dietary_restrictions: tuple[str, ...] = ()
    medical_conditions: tuple[str, ...] = ()
    cuisine: str | None = None
    variety_instructions: str = ""


@dataclass(frozen=True)
class AtomicIngredient:
    """Single searchable food term with its own weight and estimate."""

    name: str
    portion: str
    grams: float
    estimated: NutrientProfile
    parent_name: str
    is_compound_part: bool = False


class VerificationStatus(str, Enum):
    """How an ingredient's nutrients were established."""

    AUTO_MATCHED = "auto-matched"
    MANUALLY_MATCHED = "manually-matched"
    AI_ESTIMATED = "ai-estimated"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class VerifiedIngredient:
    """Atomic ingredient after matching against the reference database."""

    ingredient: AtomicIngredient
    record: ReferenceRecord | None
    nutrients: NutrientProfile
    confidence: float
    status: VerificationStatus
    notes: str = ""

    @property
    def is_verified(self) -> bool:
        return self.record is not None


@dataclass(frozen=True)
class VerifiedMeal:
    """Meal whose totals come from verified ingredients."""

    request: MealRequest
    name: str
    ingredients: list[VerifiedIngredient]
    totals: NutrientProfile
    accuracy: AccuracyReport
    provider: str
    preparation_notes: str = ""
    nutritionist_notes: str = ""
    verification_notes: str = ""
    id: UUID = field(default_factory=uuid4)

    @property
    def meal_type(self) -> MealType:
        return self.request.meal_type

    @property
    def cuisine(self) -> str | None:
        return self.request.cuisine

    @property
    def verified_count(self) -> int:
        return sum(1 for item in self.ingredients if item.is_verified)
