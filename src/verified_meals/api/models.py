"""Pydantic request bodies for the planner API."""

import datetime as dt
from uuid import UUID

from pydantic import BaseModel, Field

from verified_meals.domain.meals import MealRequest, MealType
from verified_meals.domain.nutrition import NutrientTargets
from verified_meals.domain.plans import PlanRequest


class TargetsBody(BaseModel):
    """Nutrient targets payload."""

    calories: float = Field(gt=0)
    protein_g: float = Field(ge=0)
    carbs_g: float = Field(ge=0)
    fat_g: float = Field(ge=0)
    fiber_g: float = Field(default=0.0, ge=0)
    micronutrients: dict[str, float] = Field(default_factory=dict)

    def to_domain(self) -> NutrientTargets:
        return NutrientTargets(
            calories=self.calories,
            protein_g=self.protein_g,
            carbs_g=self.carbs_g,
            fat_g=self.fat_g,
            fiber_g=self.fiber_g,
            micronutrients=dict(self.micronutrients),
        )


class PlanBody(BaseModel):
    """Multi-day plan request payload."""

    daily_targets: TargetsBody
    number_of_days: int = Field(ge=1, le=31)
    start_date: dt.date | None = None
    meals_per_day: list[MealType] = Field(
        default_factory=lambda: [MealType.BREAKFAST, MealType.LUNCH, MealType.DINNER],
        min_length=1,
    )
    cuisine_rotation: list[str] = Field(default_factory=list)
    dietary_restrictions: list[str] = Field(default_factory=list)
    medical_conditions: list[str] = Field(default_factory=list)
    patient_id: UUID | None = None

    def to_domain(self) -> PlanRequest:
        return PlanRequest(
            daily_targets=self.daily_targets.to_domain(),
            number_of_days=self.number_of_days,
            start_date=self.start_date or dt.datetime.now(tz=dt.UTC).date(),
            meals_per_day=tuple(self.meals_per_day),
            cuisine_rotation=tuple(self.cuisine_rotation),
            dietary_restrictions=tuple(self.dietary_restrictions),
            medical_conditions=tuple(self.medical_conditions),
            patient_id=self.patient_id,
        )


class MealBody(BaseModel):
    """Single meal verification payload."""

    targets: TargetsBody
    meal_type: MealType
    dietary_restrictions: list[str] = Field(default_factory=list)
    medical_conditions: list[str] = Field(default_factory=list)
    cuisine: str | None = None

    def to_domain(self) -> MealRequest:
        return MealRequest(
            targets=self.targets.to_domain(),
            meal_type=self.meal_type,
            dietary_restrictions=tuple(self.dietary_restrictions),
            medical_conditions=tuple(self.medical_conditions),
            cuisine=self.cuisine,
        )


class ChooseBody(BaseModel):
    """Manual selection choice payload."""

    fdc_id: int
