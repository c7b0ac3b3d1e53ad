"""Versioned, read-only snapshots of plans for report and export consumers."""

import datetime as dt
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from verified_meals.domain.accuracy import AccuracyReport
from verified_meals.domain.meals import VerifiedIngredient, VerifiedMeal
from verified_meals.domain.nutrition import NutrientProfile
from verified_meals.domain.plans import DailyPlan, MultiDayPlan
from verified_meals.services.accuracy import macro_energy_split

SCHEMA_VERSION = 1


class _Snapshot(BaseModel):
    model_config = ConfigDict(frozen=True)


class NutrientsExport(_Snapshot):
    calories: float
    protein_g: float
    carbs_g: float
    fat_g: float
    fiber_g: float
    micronutrients: dict[str, float] = {}


class NutrientScoreExport(_Snapshot):
    actual: float
    target: float
    status: str
    score: float


class AccuracyExport(_Snapshot):
    overall: float
    grade: str
    macro_score: float
    micro_score: float | None
    nutrients: dict[str, NutrientScoreExport]
    recommendations: list[str]
    warnings: list[str]


class IngredientExport(_Snapshot):
    name: str
    parent_name: str
    portion: str
    grams: float
    status: str
    confidence: float
    fdc_id: int | None
    reference_description: str | None
    nutrients: NutrientsExport
    notes: str


class MealExport(_Snapshot):
    schema_version: Literal[1] = SCHEMA_VERSION
    id: UUID
    meal_type: str
    name: str
    cuisine: str | None
    provider: str
    ingredients: list[IngredientExport]
    totals: NutrientsExport
    energy_split: dict[str, float]
    accuracy: AccuracyExport
    preparation_notes: str
    nutritionist_notes: str
    verification_notes: str


class DayExport(_Snapshot):
    day_number: int
    date: dt.date
    meals: list[MealExport]
    totals: NutrientsExport
    average_accuracy: float


class PlanExport(_Snapshot):
    schema_version: Literal[1] = SCHEMA_VERSION
    id: UUID
    patient_id: UUID | None
    start_date: dt.date
    end_date: dt.date
    number_of_days: int
    generated_at: dt.datetime
    days: list[DayExport]
    totals: NutrientsExport
    average_daily: NutrientsExport
    overall_accuracy: float


def export_meal(meal: VerifiedMeal) -> MealExport:
    return MealExport(
        id=meal.id,
        meal_type=meal.meal_type.value,
        name=meal.name,
        cuisine=meal.cuisine,
        provider=meal.provider,
        ingredients=[_export_ingredient(item) for item in meal.ingredients],
        totals=_export_nutrients(meal.totals),
        energy_split=macro_energy_split(meal.totals),
        accuracy=_export_accuracy(meal.accuracy),
        preparation_notes=meal.preparation_notes,
        nutritionist_notes=meal.nutritionist_notes,
        verification_notes=meal.verification_notes,
    )


def export_plan(plan: MultiDayPlan) -> PlanExport:
    return PlanExport(
        id=plan.id,
        patient_id=plan.request.patient_id,
        start_date=plan.request.start_date,
        end_date=plan.end_date,
        number_of_days=len(plan.days),
        generated_at=plan.generated_at,
        days=[_export_day(day) for day in plan.days],
        totals=_export_nutrients(plan.summary.totals),
        average_daily=_export_nutrients(plan.summary.average_daily),
        overall_accuracy=plan.summary.overall_accuracy,
    )


def _export_day(day: DailyPlan) -> DayExport:
    return DayExport(
        day_number=day.day_number,
        date=day.date,
        meals=[export_meal(meal) for meal in day.meals],
        totals=_export_nutrients(day.summary.totals),
        average_accuracy=day.summary.average_accuracy,
    )


def _export_ingredient(item: VerifiedIngredient) -> IngredientExport:
    return IngredientExport(
        name=item.ingredient.name,
        parent_name=item.ingredient.parent_name,
        portion=item.ingredient.portion,
        grams=item.ingredient.grams,
        status=item.status.value,
        confidence=item.confidence,
        fdc_id=item.record.fdc_id if item.record else None,
        reference_description=item.record.description if item.record else None,
        nutrients=_export_nutrients(item.nutrients),
        notes=item.notes,
    )


def _export_nutrients(profile: NutrientProfile) -> NutrientsExport:
    return NutrientsExport(
        calories=profile.calories,
        protein_g=profile.protein_g,
        carbs_g=profile.carbs_g,
        fat_g=profile.fat_g,
        fiber_g=profile.fiber_g,
        micronutrients=dict(profile.micronutrients),
    )


def _export_accuracy(report: AccuracyReport) -> AccuracyExport:
    evaluations = {**report.macronutrients, **report.micronutrients}
    return AccuracyExport(
        overall=report.overall,
        grade=report.grade,
        macro_score=report.macro_score,
        micro_score=report.micro_score,
        nutrients={
            name: NutrientScoreExport(
                actual=evaluation.actual,
                target=evaluation.target,
                status=evaluation.status.value,
                score=evaluation.score,
            )
            for name, evaluation in evaluations.items()
        },
        recommendations=[item.message for item in report.recommendations],
        warnings=[item.message for item in report.warnings],
    )
