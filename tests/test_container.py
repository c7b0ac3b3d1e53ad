"""Tests for container wiring."""

import asyncio
import datetime as dt

import pytest

from tests.conftest import StubVerifier
from verified_meals.adapters.openai_client import OpenAIProvider
from verified_meals.config import Settings
from verified_meals.containers import build_container, build_providers
from verified_meals.domain.nutrition import NutrientTargets
from verified_meals.domain.plans import PlanRequest, RunState
from verified_meals.services.planner import MultiDayPlanner, PlanRun


def test_build_container_creates_services(settings: Settings) -> None:
    container = build_container(settings)

    assert container.provider_chain.names == ["template"]
    assert container.selection_queue.timeout_seconds == 900.0
    assert container.verification_service.matching.resolver is (
        container.selection_queue
    )
    planner = container.new_planner()
    assert planner.ingredient_lookback_days == 3
    assert planner.cuisine_lookback_days == 2
    asyncio.run(container.close_resources())


def test_providers_follow_configured_order(settings: Settings) -> None:
    configured = settings.model_copy(
        update={
            "provider_order": "openai, anthropic, template",
            "openai_api_key": "openai-key",
            "anthropic_api_key": "anthropic-key",
        }
    )

    providers, closers = build_providers(configured)

    assert [provider.name for provider in providers] == [
        "openai",
        "anthropic",
        "template",
    ]
    assert len(closers) == 2

    async def close_all() -> None:
        for close in closers:
            await close()

    asyncio.run(close_all())


def test_providers_without_keys_are_skipped(settings: Settings) -> None:
    configured = settings.model_copy(
        update={"provider_order": "anthropic,openai,template"}
    )

    providers, closers = build_providers(configured)

    assert [provider.name for provider in providers] == ["template"]
    assert closers == []


def test_unknown_provider_is_rejected(settings: Settings) -> None:
    configured = settings.model_copy(update={"provider_order": "template,gemini"})

    with pytest.raises(ValueError):
        build_providers(configured)


def test_zero_timeout_waits_forever(settings: Settings) -> None:
    container = build_container(
        settings.model_copy(update={"selection_timeout_seconds": 0})
    )

    assert container.selection_queue.timeout_seconds is None
    asyncio.run(container.close_resources())


def test_openrouter_uses_openai_compatible_endpoint(settings: Settings) -> None:
    configured = settings.model_copy(
        update={
            "provider_order": "openrouter,template",
            "openrouter_api_key": "openrouter-key",
        }
    )

    providers, closers = build_providers(configured)

    assert [provider.name for provider in providers] == ["openrouter", "template"]
    openrouter = providers[0]
    assert isinstance(openrouter, OpenAIProvider)
    assert openrouter.model == "openai/gpt-4o-mini"
    assert str(openrouter.client.base_url).startswith("https://openrouter.ai/api/v1")

    async def close_all() -> None:
        for close in closers:
            await close()

    asyncio.run(close_all())


@pytest.fixture
def leaked_provider_keys(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ANTHROPIC_API_KEY", "ambient-anthropic")
    monkeypatch.setenv("OPENAI_API_KEY", "ambient-openai")
    monkeypatch.setenv("OPENROUTER_API_KEY", "ambient-openrouter")


def test_fixture_settings_ignore_ambient_keys(
    leaked_provider_keys: None, settings: Settings
) -> None:
    configured = settings.model_copy(
        update={"provider_order": "anthropic,openai,openrouter,template"}
    )

    providers, _ = build_providers(configured)

    assert settings.anthropic_api_key is None
    assert settings.openai_api_key is None
    assert [provider.name for provider in providers] == ["template"]


def _finished_run(request: PlanRequest, state: RunState) -> PlanRun:
    run = PlanRun(request=request, planner=MultiDayPlanner(verifier=StubVerifier()))
    run.progress.state = state
    return run


def test_finished_runs_are_evicted_oldest_first(
    settings: Settings, daily_targets: NutrientTargets
) -> None:
    container = build_container(settings.model_copy(update={"max_retained_runs": 2}))
    request = PlanRequest(
        daily_targets=daily_targets, number_of_days=1, start_date=dt.date(2026, 3, 1)
    )
    oldest = _finished_run(request, RunState.COMPLETE)
    running = _finished_run(request, RunState.GENERATING)
    failed = _finished_run(request, RunState.FAILED)
    newest = _finished_run(request, RunState.IDLE)

    for run in (oldest, running, failed, newest):
        container.track_run(run)

    assert list(container.runs) == [running.id, newest.id]
    asyncio.run(container.close_resources())
