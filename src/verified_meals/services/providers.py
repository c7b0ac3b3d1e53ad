"""Ordered fallback across interchangeable suggestion providers."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol, TypeVar

from verified_meals.domain.errors import (
    TRANSIENT_SKIP_ERRORS,
    AllProvidersUnavailableError,
    ProviderError,
    SuggestionParseError,
)

_logger = logging.getLogger(__name__)

T = TypeVar("T")


class SuggestionProvider(Protocol):
    """Text generation backend: prompt in, free text out."""

    name: str

    async def generate_completion(self, prompt: str) -> str:
        """Return raw completion text or raise a ProviderError."""


@dataclass
class SuggestionProviderChain:
    """Try providers strictly in priority order; the first success wins."""

    providers: list[SuggestionProvider] = field(default_factory=list)

    async def complete(
        self, prompt: str, parser: Callable[[str], T]
    ) -> tuple[str, T]:
        """Return the provider name and parsed output of the first success.

        Rate-limit and quota failures move on silently. Other provider errors
        and unparseable output are recorded and also move on; the same
        provider is never asked twice.
        """
        errors: list[str] = []
        for provider in self.providers:
            _logger.info("Trying suggestion provider: %s", provider.name)
            try:
                raw = await provider.generate_completion(prompt)
                parsed = parser(raw)
            except TRANSIENT_SKIP_ERRORS as exc:
                _logger.warning(
                    "Provider %s is rate limited (%s), trying next provider",
                    provider.name,
                    type(exc).__name__,
                )
                continue
            except (ProviderError, SuggestionParseError) as exc:
                _logger.warning("Provider %s failed: %s", provider.name, exc)
                errors.append(f"{provider.name}: {exc}")
                continue
            _logger.info("Suggestion generated by %s", provider.name)
            return provider.name, parsed

        raise AllProvidersUnavailableError(errors)

    @property
    def names(self) -> list[str]:
        return [provider.name for provider in self.providers]
