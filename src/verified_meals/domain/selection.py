"""Domain models for manual match resolution."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from uuid import UUID, uuid4

from verified_meals.domain.meals import AtomicIngredient
from verified_meals.domain.nutrition import ReferenceRecord


@dataclass(frozen=True)
class ScoredCandidate:
    """Reference record with its match score for one ingredient."""

    record: ReferenceRecord
    score: float


@dataclass(frozen=True)
class PendingSelection:
    """Ingredient waiting for a person to pick a reference record."""

    ingredient: AtomicIngredient
    candidates: tuple[ScoredCandidate, ...]
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=lambda: datetime.now(tz=UTC))

    def candidate(self, fdc_id: int) -> ReferenceRecord | None:
        for candidate in self.candidates:
            if candidate.record.fdc_id == fdc_id:
                return candidate.record
        return None


@dataclass(frozen=True)
class SelectionDecision:
    """Outcome of a pending selection: a chosen record or an explicit skip."""

    record: ReferenceRecord | None
    timed_out: bool = False

    @property
    def skipped(self) -> bool:
        return self.record is None


class QueueStatus(str, Enum):
    """What the manual-resolution queue is currently doing."""

    IDLE = "idle"
    WAITING = "waiting"
    SELECTING = "selecting"
