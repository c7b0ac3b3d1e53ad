"""FIFO queue for matches that need a human decision."""

import asyncio
import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Protocol
from uuid import UUID

from verified_meals.domain.errors import SelectionCancelledError, SelectionNotActiveError
from verified_meals.domain.selection import (
    PendingSelection,
    QueueStatus,
    SelectionDecision,
)

_logger = logging.getLogger(__name__)


class SelectionResolver(Protocol):
    """Anything that can turn a pending selection into a decision."""

    async def submit(self, selection: PendingSelection) -> SelectionDecision:
        """Wait until the selection is resolved."""


@dataclass(eq=False)
class _QueuedSelection:
    selection: PendingSelection
    decision: asyncio.Future
    activated: asyncio.Event = field(default_factory=asyncio.Event)


@dataclass
class PendingSelectionQueue(SelectionResolver):
    """Single shared queue between the pipeline and the external resolver.

    Arrival order is preserved and at most one selection is active at a time.
    The timeout starts when a selection becomes active; an expired selection
    resolves as a skip and the next one is presented. A timeout of ``None``
    or ``0`` waits indefinitely.
    """

    timeout_seconds: float | None = 900.0
    _waiting: deque[_QueuedSelection] = field(default_factory=deque)
    _active: _QueuedSelection | None = None

    async def submit(self, selection: PendingSelection) -> SelectionDecision:
        """Enqueue a selection and wait for its decision."""
        entry = _QueuedSelection(
            selection=selection,
            decision=asyncio.get_running_loop().create_future(),
        )
        self._waiting.append(entry)
        _logger.info(
            "Queued manual selection %s for %r (%s candidates)",
            selection.id,
            selection.ingredient.name,
            len(selection.candidates),
        )
        self._promote()

        try:
            await entry.activated.wait()
            if not self.timeout_seconds:
                return await entry.decision
            return await asyncio.wait_for(
                asyncio.shield(entry.decision), self.timeout_seconds
            )
        except TimeoutError:
            _logger.warning(
                "Manual selection %s timed out after %ss, skipping",
                selection.id,
                self.timeout_seconds,
            )
            self._finish(entry, SelectionDecision(record=None, timed_out=True))
            return entry.decision.result()
        except asyncio.CancelledError:
            self._discard(entry)
            raise

    def active(self) -> PendingSelection | None:
        """Selection currently presented to the resolver."""
        return self._active.selection if self._active else None

    def pending(self) -> list[PendingSelection]:
        """Selections waiting behind the active one, oldest first."""
        return [entry.selection for entry in self._waiting]

    def status(self) -> QueueStatus:
        if self._active is not None:
            return QueueStatus.SELECTING
        if self._waiting:
            return QueueStatus.WAITING
        return QueueStatus.IDLE

    def choose(self, selection_id: UUID, fdc_id: int) -> SelectionDecision:
        """Resolve the active selection with one of its candidates."""
        entry = self._require_active(selection_id)
        record = entry.selection.candidate(fdc_id)
        if record is None:
            raise ValueError(f"Food {fdc_id} is not a candidate for {selection_id}")
        decision = SelectionDecision(record=record)
        _logger.info("Manual selection %s resolved with food %s", selection_id, fdc_id)
        self._finish(entry, decision)
        return decision

    def skip(self, selection_id: UUID) -> SelectionDecision:
        """Resolve the active selection without a record."""
        entry = self._require_active(selection_id)
        decision = SelectionDecision(record=None)
        _logger.info("Manual selection %s skipped", selection_id)
        self._finish(entry, decision)
        return decision

    def cancel_all(self) -> int:
        """Fail every outstanding selection; returns how many were cancelled."""
        entries = list(self._waiting)
        if self._active is not None:
            entries.insert(0, self._active)
        self._waiting.clear()
        self._active = None
        for entry in entries:
            if not entry.decision.done():
                entry.decision.set_exception(
                    SelectionCancelledError(
                        f"Selection {entry.selection.id} was cancelled"
                    )
                )
            entry.activated.set()
        if entries:
            _logger.warning("Cancelled %s pending manual selections", len(entries))
        return len(entries)

    def _require_active(self, selection_id: UUID) -> _QueuedSelection:
        entry = self._active
        if entry is None or entry.selection.id != selection_id:
            raise SelectionNotActiveError(f"Selection {selection_id} is not active")
        return entry

    def _finish(self, entry: _QueuedSelection, decision: SelectionDecision) -> None:
        if not entry.decision.done():
            entry.decision.set_result(decision)
        if self._active is entry:
            self._active = None
        self._promote()

    def _discard(self, entry: _QueuedSelection) -> None:
        if entry in self._waiting:
            self._waiting.remove(entry)
        if not entry.decision.done():
            entry.decision.cancel()
        if self._active is entry:
            self._active = None
        self._promote()

    def _promote(self) -> None:
        if self._active is None and self._waiting:
            self._active = self._waiting.popleft()
            self._active.activated.set()
            _logger.info("Presenting manual selection %s", self._active.selection.id)
