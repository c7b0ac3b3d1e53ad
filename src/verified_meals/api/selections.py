"""Manual match resolution endpoints with simple token auth."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

from verified_meals.api.models import ChooseBody
from verified_meals.domain.errors import SelectionNotActiveError

if TYPE_CHECKING:
    from verified_meals.containers import AppContainer
    from verified_meals.domain.selection import PendingSelection

router = APIRouter(prefix="/selections", tags=["selections"])


def _get_operator_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.operator_token


async def require_operator(
    x_operator_token: str | None = Header(default=None),
    operator_token: str = Depends(_get_operator_token),
) -> None:
    """Ensure requests include a valid operator token."""
    if not x_operator_token or x_operator_token != operator_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


@router.get("/active", dependencies=[Depends(require_operator)])
async def active_selection(request: Request) -> dict[str, object]:
    """Return the selection currently awaiting a decision, if any."""
    container: AppContainer = request.app.state.container
    queue = container.selection_queue
    selection = queue.active()
    return {
        "status": queue.status().value,
        "selection": _serialize(selection) if selection else None,
    }


@router.get("", dependencies=[Depends(require_operator)])
async def list_selections(request: Request) -> dict[str, object]:
    """Return the active selection and everything queued behind it."""
    container: AppContainer = request.app.state.container
    queue = container.selection_queue
    active = queue.active()
    return {
        "status": queue.status().value,
        "active": _serialize(active) if active else None,
        "pending": [_serialize(selection) for selection in queue.pending()],
    }


@router.post("/{selection_id}/choose", dependencies=[Depends(require_operator)])
async def choose_selection(
    selection_id: UUID, body: ChooseBody, request: Request
) -> dict[str, object]:
    """Resolve the active selection with one of its candidates."""
    container: AppContainer = request.app.state.container
    try:
        decision = container.selection_queue.choose(selection_id, body.fdc_id)
    except SelectionNotActiveError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    record = decision.record
    return {
        "status": "chosen",
        "fdc_id": record.fdc_id if record else None,
        "description": record.description if record else None,
    }


@router.post("/{selection_id}/skip", dependencies=[Depends(require_operator)])
async def skip_selection(selection_id: UUID, request: Request) -> dict[str, object]:
    """Resolve the active selection by keeping the estimate."""
    container: AppContainer = request.app.state.container
    try:
        container.selection_queue.skip(selection_id)
    except SelectionNotActiveError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    return {"status": "skipped"}


def _serialize(selection: PendingSelection) -> dict[str, object]:
    ingredient = selection.ingredient
    return {
        "id": str(selection.id),
        "created_at": selection.created_at.isoformat(),
        "ingredient": {
            "name": ingredient.name,
            "parent_name": ingredient.parent_name,
            "portion": ingredient.portion,
            "grams": ingredient.grams,
            "estimated_calories": ingredient.estimated.calories,
            "estimated_protein_g": ingredient.estimated.protein_g,
        },
        "candidates": [
            {
                "fdc_id": candidate.record.fdc_id,
                "description": candidate.record.description,
                "data_type": candidate.record.data_type,
                "brand": candidate.record.brand,
                "calories_per_100g": candidate.record.calories,
                "protein_g_per_100g": candidate.record.protein_g,
                "confidence": round(candidate.score, 4),
            }
            for candidate in selection.candidates
        ],
    }
