"""Models for provider meal suggestions before verification."""

from pydantic import BaseModel, Field, field_validator

from verified_meals.domain.nutrition import NutrientProfile


class SuggestedFood(BaseModel):
    """Single food line as estimated by a suggestion provider."""

    food_name: str = Field(min_length=1)
    portion_description: str = ""
    gram_weight: float = Field(gt=0)
    calories: float = Field(gt=0)
    protein: float = Field(default=0.0, ge=0)
    carbs: float = Field(default=0.0, ge=0)
    fat: float = Field(default=0.0, ge=0)

    @field_validator("food_name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("food_name must not be blank")
        return cleaned

    def estimated_nutrients(self) -> NutrientProfile:
        """Provider estimate for the whole portion."""
        return NutrientProfile(
            calories=self.calories,
            protein_g=self.protein,
            carbs_g=self.carbs,
            fat_g=self.fat,
        )


class SuggestedTotals(BaseModel):
    """Totals as claimed by the provider, kept for auditing only."""

    calories: float = Field(default=0.0, ge=0)
    protein: float = Field(default=0.0, ge=0)
    carbs: float = Field(default=0.0, ge=0)
    fat: float = Field(default=0.0, ge=0)


class RawSuggestion(BaseModel):
    """Structured meal suggestion that passed validation."""

    meal_name: str
    foods: list[SuggestedFood] = Field(min_length=1)
    total_nutrition: SuggestedTotals | None = None
    preparation_notes: str = ""
    nutritionist_notes: str = ""

    @field_validator("meal_name")
    @classmethod
    def _require_name(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("meal_name must not be empty")
        return cleaned
