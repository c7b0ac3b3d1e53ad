"""OpenAI Chat Completions suggestion provider."""

from dataclasses import dataclass

import openai
from openai import AsyncOpenAI

from verified_meals.domain.errors import (
    InvalidKeyError,
    ProviderNetworkError,
    ProviderServerError,
    QuotaExceededError,
    RateLimitedError,
)
from verified_meals.services.providers import SuggestionProvider


@dataclass
class OpenAIProvider(SuggestionProvider):
    """Provider backed by the OpenAI async SDK."""

    client: AsyncOpenAI
    model: str
    max_tokens: int = 1500
    temperature: float = 0.3
    name: str = "openai"

    @classmethod
    def create(
        cls,
        api_key: str,
        model: str,
        base_url: str | None = None,
        name: str = "openai",
    ) -> "OpenAIProvider":
        """Create a provider for OpenAI or an OpenAI-compatible endpoint."""
        return cls(
            client=AsyncOpenAI(api_key=api_key, base_url=base_url),
            model=model,
            name=name,
        )

    async def generate_completion(self, prompt: str) -> str:
        """Call Chat Completions and return the message content."""
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=self.max_tokens,
                temperature=self.temperature,
            )
        except openai.RateLimitError as exc:
            if _error_code(exc) == "insufficient_quota":
                raise QuotaExceededError(f"{self.name} quota exceeded") from exc
            raise RateLimitedError(f"{self.name} rate limit exceeded") from exc
        except openai.AuthenticationError as exc:
            raise InvalidKeyError(f"{self.name} rejected the API key") from exc
        except openai.APIConnectionError as exc:
            raise ProviderNetworkError(str(exc)) from exc
        except openai.APIStatusError as exc:
            if exc.status_code == 402:
                raise QuotaExceededError(f"{self.name} credits exhausted") from exc
            raise ProviderServerError(exc.status_code, exc.message) from exc

        if not response.choices:
            raise ProviderServerError(200, "response has no choices")
        content = response.choices[0].message.content
        if not content:
            raise ProviderServerError(200, "response has empty content")
        return content

    async def close(self) -> None:
        """Close the underlying SDK client."""
        await self.client.close()


def _error_code(exc: openai.APIStatusError) -> str | None:
    code = getattr(exc, "code", None)
    if isinstance(code, str):
        return code
    body = getattr(exc, "body", None)
    if isinstance(body, dict):
        value = body.get("code")
        if isinstance(value, str):
            return value
    return None
