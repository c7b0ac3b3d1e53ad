"""Tests for the manual selection queue."""

import asyncio

import pytest

from tests.conftest import atomic
from verified_meals.domain.errors import SelectionCancelledError, SelectionNotActiveError
from verified_meals.domain.nutrition import ENERGY_ID, PROTEIN_ID, ReferenceRecord
from verified_meals.domain.selection import PendingSelection, QueueStatus, ScoredCandidate
from verified_meals.services.selection import PendingSelectionQueue


def _selection(name: str) -> PendingSelection:
    record = ReferenceRecord(
        fdc_id=1,
        description=f"{name}, raw",
        data_type="SR Legacy",
        brand=None,
        nutrients_per_100g={ENERGY_ID: 100.0, PROTEIN_ID: 10.0},
    )
    return PendingSelection(
        ingredient=atomic(name),
        candidates=(ScoredCandidate(record=record, score=0.6),),
    )


def test_selections_are_presented_one_at_a_time_in_order() -> None:
    async def scenario() -> None:
        queue = PendingSelectionQueue(timeout_seconds=None)
        assert queue.status() is QueueStatus.IDLE
        first, second = _selection("Kale"), _selection("Farro")
        first_task = asyncio.create_task(queue.submit(first))
        second_task = asyncio.create_task(queue.submit(second))
        await asyncio.sleep(0)

        assert queue.active() is first
        assert queue.pending() == [second]
        assert queue.status() is QueueStatus.SELECTING
        with pytest.raises(SelectionNotActiveError):
            queue.choose(second.id, 1)
        with pytest.raises(ValueError):
            queue.choose(first.id, 999)

        queue.choose(first.id, 1)
        first_decision = await first_task
        assert first_decision.record is not None
        assert first_decision.record.fdc_id == 1
        assert queue.active() is second
        assert queue.pending() == []

        queue.skip(second.id)
        second_decision = await second_task
        assert second_decision.skipped
        assert not second_decision.timed_out
        assert queue.status() is QueueStatus.IDLE

    asyncio.run(scenario())


def test_active_selection_times_out_as_skip() -> None:
    async def scenario() -> None:
        queue = PendingSelectionQueue(timeout_seconds=0.05)
        first, second = _selection("Kale"), _selection("Farro")
        first_task = asyncio.create_task(queue.submit(first))
        second_task = asyncio.create_task(queue.submit(second))

        first_decision = await first_task
        assert first_decision.skipped
        assert first_decision.timed_out
        assert queue.active() is second

        queue.skip(second.id)
        assert (await second_task).skipped

    asyncio.run(scenario())


def test_cancel_all_fails_outstanding_selections() -> None:
    async def scenario() -> None:
        queue = PendingSelectionQueue(timeout_seconds=5)
        tasks = [
            asyncio.create_task(queue.submit(_selection(name)))
            for name in ("Kale", "Farro")
        ]
        await asyncio.sleep(0)

        assert queue.cancel_all() == 2
        results = await asyncio.gather(*tasks, return_exceptions=True)

        assert all(isinstance(result, SelectionCancelledError) for result in results)
        assert queue.status() is QueueStatus.IDLE
        with pytest.raises(SelectionNotActiveError):
            queue.skip(_selection("Kale").id)

    asyncio.run(scenario())


def test_cancelled_waiter_releases_its_slot() -> None:
    async def scenario() -> None:
        queue = PendingSelectionQueue(timeout_seconds=None)
        first, second = _selection("Kale"), _selection("Farro")
        first_task = asyncio.create_task(queue.submit(first))
        second_task = asyncio.create_task(queue.submit(second))
        await asyncio.sleep(0)

        first_task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await first_task

        assert queue.active() is second
        queue.skip(second.id)
        await second_task

    asyncio.run(scenario())
