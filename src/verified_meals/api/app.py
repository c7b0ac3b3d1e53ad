"""FastAPI application factory."""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from uuid import UUID

from fastapi import FastAPI, HTTPException, Request, status

from verified_meals.api.models import MealBody, PlanBody
from verified_meals.api.selections import router as selections_router
from verified_meals.app_logging import configure_logging
from verified_meals.containers import AppContainer
from verified_meals.domain.errors import (
    AllProvidersUnavailableError,
    ReferenceLookupError,
    SelectionCancelledError,
)
from verified_meals.services.export import export_meal, export_plan
from verified_meals.services.planner import PlanRun


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)
    background_tasks: set[asyncio.Task] = set()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        for task in background_tasks:
            task.cancel()
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(selections_router)

    @app.get("/health")
    async def health() -> dict[str, object]:
        """Simple health check endpoint."""
        return {"status": "ok", "providers": container.provider_chain.names}

    @app.post("/plans", status_code=status.HTTP_202_ACCEPTED)
    async def start_plan(body: PlanBody, request: Request) -> dict[str, object]:
        """Start a multi-day generation run in the background."""
        container: AppContainer = request.app.state.container
        try:
            plan_request = body.to_domain()
        except ValueError as exc:
            raise HTTPException(status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
        run = PlanRun(request=plan_request, planner=container.new_planner())
        container.track_run(run)
        task = asyncio.create_task(run.execute())
        background_tasks.add(task)
        task.add_done_callback(background_tasks.discard)
        logger.info(
            "Started plan run %s for %s days", run.id, plan_request.number_of_days
        )
        return {"run_id": str(run.id), "total_meals": plan_request.total_meals}

    @app.get("/plans/{run_id}")
    async def plan_status(run_id: UUID, request: Request) -> dict[str, object]:
        """Return progress for a run and the exported plan once complete."""
        container: AppContainer = request.app.state.container
        run = container.runs.get(run_id)
        if run is None:
            raise HTTPException(status.HTTP_404_NOT_FOUND, detail="Unknown run")
        progress = run.progress
        return {
            "run_id": str(run.id),
            "state": progress.state.value,
            "current_day": progress.current_day,
            "completed_meals": progress.completed_meals,
            "total_meals": progress.total_meals,
            "error": progress.error,
            "plan": export_plan(run.plan).model_dump(mode="json") if run.plan else None,
        }

    @app.post("/meals/verify")
    async def verify_meal(body: MealBody, request: Request) -> dict[str, object]:
        """Generate and verify a single meal."""
        container: AppContainer = request.app.state.container
        try:
            meal = await container.verification_service.verify(body.to_domain())
        except (AllProvidersUnavailableError, SelectionCancelledError) as exc:
            logger.warning("Meal verification unavailable: %s", exc)
            raise HTTPException(
                status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)
            ) from exc
        except ReferenceLookupError as exc:
            logger.warning("Reference lookup failed: %s", exc)
            raise HTTPException(status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
        return export_meal(meal).model_dump(mode="json")

    return app
