"""Domain models for multi-day plans."""

from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from enum import Enum
from uuid import UUID, uuid4

from verified_meals.domain.accuracy import AccuracyReport
from verified_meals.domain.meals import MealType, VerifiedMeal
from verified_meals.domain.nutrition import NutrientProfile, NutrientTargets


@dataclass(frozen=True)
class PlanRequest:
    """Parameters for a multi-day generation run."""

    daily_targets: NutrientTargets
    number_of_days: int
    start_date: date
    meals_per_day: tuple[MealType, ...] = (
        MealType.BREAKFAST,
        MealType.LUNCH,
        MealType.DINNER,
    )
    cuisine_rotation: tuple[str, ...] = ()
    dietary_restrictions: tuple[str, ...] = ()
    medical_conditions: tuple[str, ...] = ()
    patient_id: UUID | None = None

    def __post_init__(self) -> None:
        if self.number_of_days < 1:
            raise ValueError("number_of_days must be at least 1")
        if not self.meals_per_day:
            raise ValueError("meals_per_day must not be empty")

    @property
    def total_meals(self) -> int:
        return self.number_of_days * len(self.meals_per_day)


@dataclass(frozen=True)
class DailySummary:
    """Nutrient totals and mean accuracy for one day."""

    totals: NutrientProfile
    average_accuracy: float
    accuracy: AccuracyReport | None = None


@dataclass(frozen=True)
class DailyPlan:
    """Verified meals for one calendar date."""

    day_number: int
    date: date
    meals: list[VerifiedMeal]
    summary: DailySummary


@dataclass(frozen=True)
class PlanSummary:
    """Plan-wide totals and per-day averages."""

    totals: NutrientProfile
    average_daily: NutrientProfile
    overall_accuracy: float


@dataclass(frozen=True)
class MultiDayPlan:
    """Finished plan handed to report and export collaborators."""

    request: PlanRequest
    days: list[DailyPlan]
    summary: PlanSummary
    id: UUID = field(default_factory=uuid4)
    generated_at: datetime = field(default_factory=lambda: datetime.now(tz=UTC))

    @property
    def end_date(self) -> date:
        return self.days[-1].date if self.days else self.request.start_date


class RunState(str, Enum):
    """Lifecycle of a generation run."""

    IDLE = "idle"
    GENERATING = "generating"
    COMPLETE = "complete"
    FAILED = "failed"


@dataclass
class RunProgress:
    """Observable progress counters; never used for control decisions."""

    state: RunState = RunState.IDLE
    current_day: int = 0
    completed_meals: int = 0
    total_meals: int = 0
    error: str | None = None
