"""Dependency container wiring for the application."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from uuid import UUID

from verified_meals.adapters.anthropic_client import AnthropicProvider
from verified_meals.adapters.fdc_client import HttpxFdcClient
from verified_meals.adapters.openai_client import OpenAIProvider
from verified_meals.adapters.template_provider import TemplateProvider
from verified_meals.config import Settings, parse_csv
from verified_meals.services.cache import InMemoryCache
from verified_meals.services.matching import MatchingEngine
from verified_meals.services.planner import MultiDayPlanner, PlanRun
from verified_meals.services.providers import SuggestionProvider, SuggestionProviderChain
from verified_meals.services.reference import ReferenceLookupService
from verified_meals.services.selection import PendingSelectionQueue
from verified_meals.services.suggestions import SuggestionService
from verified_meals.services.verification import MealVerificationService

_logger = logging.getLogger(__name__)


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    provider_chain: SuggestionProviderChain
    reference_service: ReferenceLookupService
    selection_queue: PendingSelectionQueue
    verification_service: MealVerificationService
    new_planner: Callable[[], MultiDayPlanner]
    close_resources: Callable[[], Awaitable[None]]
    runs: dict[UUID, PlanRun] = field(default_factory=dict)

    def track_run(self, run: PlanRun) -> None:
        """Register a run and evict the oldest finished runs over the limit."""
        self.runs[run.id] = run
        limit = max(self.settings.max_retained_runs, 1)
        for run_id in [key for key, kept in self.runs.items() if kept.finished]:
            if len(self.runs) <= limit:
                break
            del self.runs[run_id]
            _logger.info("Evicted finished plan run %s", run_id)


def build_providers(
    settings: Settings,
) -> tuple[list[SuggestionProvider], list[Callable[[], Awaitable[None]]]]:
    """Create providers in configured order, skipping those without keys."""
    providers: list[SuggestionProvider] = []
    closers: list[Callable[[], Awaitable[None]]] = []
    for name in parse_csv(settings.provider_order):
        key = name.lower()
        if key == "anthropic":
            if not settings.anthropic_api_key:
                _logger.info("Anthropic provider disabled: no API key")
                continue
            anthropic = AnthropicProvider.create(
                api_key=settings.anthropic_api_key,
                model=settings.anthropic_model,
                base_url=settings.anthropic_base_url,
            )
            providers.append(anthropic)
            closers.append(anthropic.close)
        elif key == "openai":
            if not settings.openai_api_key:
                _logger.info("OpenAI provider disabled: no API key")
                continue
            openai_provider = OpenAIProvider.create(
                api_key=settings.openai_api_key, model=settings.openai_model
            )
            providers.append(openai_provider)
            closers.append(openai_provider.close)
        elif key == "openrouter":
            if not settings.openrouter_api_key:
                _logger.info("OpenRouter provider disabled: no API key")
                continue
            openrouter = OpenAIProvider.create(
                api_key=settings.openrouter_api_key,
                model=settings.openrouter_model,
                base_url=settings.openrouter_base_url,
                name="openrouter",
            )
            providers.append(openrouter)
            closers.append(openrouter.close)
        elif key == "template":
            providers.append(TemplateProvider())
        else:
            raise ValueError(f"Unknown suggestion provider: {name}")
    return providers, closers


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    fdc_client = HttpxFdcClient.create(
        api_key=resolved_settings.fdc_api_key,
        base_url=resolved_settings.fdc_base_url,
        data_types=parse_csv(resolved_settings.fdc_data_types),
    )
    providers, closers = build_providers(resolved_settings)
    provider_chain = SuggestionProviderChain(providers)
    reference_service = ReferenceLookupService(
        fdc_client=fdc_client, cache=InMemoryCache()
    )
    selection_queue = PendingSelectionQueue(
        timeout_seconds=resolved_settings.selection_timeout_seconds or None
    )
    verification_service = MealVerificationService(
        suggestions=SuggestionService(provider_chain),
        reference=reference_service,
        matching=MatchingEngine.create(resolver=selection_queue),
    )

    def new_planner() -> MultiDayPlanner:
        return MultiDayPlanner(
            verifier=verification_service,
            ingredient_lookback_days=resolved_settings.ingredient_lookback_days,
            cuisine_lookback_days=resolved_settings.cuisine_lookback_days,
        )

    async def close_resources() -> None:
        selection_queue.cancel_all()
        for close in closers:
            await close()
        await fdc_client.close()

    _logger.info("Suggestion providers: %s", ", ".join(provider_chain.names))
    return AppContainer(
        settings=resolved_settings,
        provider_chain=provider_chain,
        reference_service=reference_service,
        selection_queue=selection_queue,
        verification_service=verification_service,
        new_planner=new_planner,
        close_resources=close_resources,
    )
