"""Sequential multi-day plan generation with variety steering."""

import logging
from dataclasses import dataclass, field
from datetime import timedelta
from uuid import UUID, uuid4

from verified_meals.domain.errors import PlanGenerationError
from verified_meals.domain.meals import MealRequest, VerifiedMeal
from verified_meals.domain.nutrition import NutrientProfile, sum_profiles
from verified_meals.domain.plans import (
    DailyPlan,
    DailySummary,
    MultiDayPlan,
    PlanRequest,
    PlanSummary,
    RunProgress,
    RunState,
)
from verified_meals.services.accuracy import evaluate_accuracy
from verified_meals.services.macros import correct_macro_targets, split_for_meal
from verified_meals.services.variety import VarietyState, build_steering, pick_cuisine
from verified_meals.services.verification import MealVerificationService

_logger = logging.getLogger(__name__)


@dataclass
class MultiDayPlanner:
    """Generate days strictly in order, each meal after the previous one.

    Every meal's steering depends on all meals before it, so nothing here runs
    concurrently. Any failed meal fails the whole run.
    """

    verifier: MealVerificationService
    ingredient_lookback_days: int = 3
    cuisine_lookback_days: int = 2
    progress: RunProgress = field(default_factory=RunProgress)

    async def generate(self, request: PlanRequest) -> MultiDayPlan:
        if self.progress.state is RunState.GENERATING:
            raise RuntimeError("A plan is already being generated")

        self.progress = RunProgress(
            state=RunState.GENERATING, total_meals=request.total_meals
        )
        variety = VarietyState()
        days: list[DailyPlan] = []
        try:
            for day_number in range(1, request.number_of_days + 1):
                self.progress.current_day = day_number
                _logger.info(
                    "Generating day %s of %s", day_number, request.number_of_days
                )
                days.append(await self._generate_day(request, day_number, variety))
        except PlanGenerationError as exc:
            self.progress.state = RunState.FAILED
            self.progress.error = str(exc)
            _logger.error("Plan generation failed: %s", exc)
            raise
        except BaseException as exc:
            self.progress.state = RunState.FAILED
            self.progress.error = str(exc) or type(exc).__name__
            _logger.warning("Plan generation stopped: %r", exc)
            raise

        plan = MultiDayPlan(
            request=request, days=days, summary=summarize_plan(days)
        )
        self.progress.state = RunState.COMPLETE
        _logger.info(
            "Plan %s complete: %s days, overall accuracy %.2f",
            plan.id,
            len(days),
            plan.summary.overall_accuracy,
        )
        return plan

    async def _generate_day(
        self, request: PlanRequest, day_number: int, variety: VarietyState
    ) -> DailyPlan:
        cuisine = pick_cuisine(
            request.cuisine_rotation,
            day_number,
            variety.recent_cuisines(day_number, self.cuisine_lookback_days),
        )
        gaps = variety.nutrient_gaps(
            day_number, self.ingredient_lookback_days, request.daily_targets
        )
        meals: list[VerifiedMeal] = []
        for meal_type in request.meals_per_day:
            steering = build_steering(
                day_number,
                cuisine,
                variety.recent_ingredients(day_number, self.ingredient_lookback_days),
                gaps,
            )
            meal_request = MealRequest(
                targets=split_for_meal(request.daily_targets, meal_type),
                meal_type=meal_type,
                dietary_restrictions=request.dietary_restrictions,
                medical_conditions=request.medical_conditions,
                cuisine=cuisine,
                variety_instructions=steering,
            )
            _logger.info("Generating %s for day %s", meal_type.value, day_number)
            try:
                meal = await self.verifier.verify(meal_request)
            except Exception as exc:
                raise PlanGenerationError(day_number, meal_type.value, exc) from exc
            meals.append(meal)
            variety.record_meal(day_number, meal)
            self.progress.completed_meals += 1

        totals = sum_profiles([meal.totals for meal in meals])
        return DailyPlan(
            day_number=day_number,
            date=request.start_date + timedelta(days=day_number - 1),
            meals=meals,
            summary=DailySummary(
                totals=totals,
                average_accuracy=_mean([meal.accuracy.overall for meal in meals]),
                accuracy=evaluate_accuracy(
                    totals, correct_macro_targets(request.daily_targets)
                ),
            ),
        )


def summarize_plan(days: list[DailyPlan]) -> PlanSummary:
    totals = sum_profiles([day.summary.totals for day in days])
    average_daily = totals.scaled(1.0 / len(days)) if days else NutrientProfile.zero()
    return PlanSummary(
        totals=totals,
        average_daily=average_daily,
        overall_accuracy=_mean([day.summary.average_accuracy for day in days]),
    )


def _mean(values: list[float]) -> float:
    return sum(values) / len(values) if values else 0.0


@dataclass
class PlanRun:
    """One background generation run, observable while it executes."""

    request: PlanRequest
    planner: MultiDayPlanner
    id: UUID = field(default_factory=uuid4)
    plan: MultiDayPlan | None = None

    @property
    def progress(self) -> RunProgress:
        return self.planner.progress

    @property
    def finished(self) -> bool:
        return self.progress.state in {RunState.COMPLETE, RunState.FAILED}

    async def execute(self) -> MultiDayPlan | None:
        """Run the planner; failures are kept on the run's progress."""
        try:
            self.plan = await self.planner.generate(self.request)
        except PlanGenerationError:
            _logger.exception("Plan run %s failed", self.id)
        return self.plan
