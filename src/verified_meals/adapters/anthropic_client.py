"""Anthropic Messages API suggestion provider."""

from dataclasses import dataclass

import httpx

from verified_meals.domain.errors import (
    InvalidKeyError,
    ProviderNetworkError,
    ProviderServerError,
    QuotaExceededError,
    RateLimitedError,
)
from verified_meals.services.providers import SuggestionProvider

_API_VERSION = "2023-06-01"

_SYSTEM_PROMPT = (
    "You are a professional registered dietitian and nutrition expert. "
    "Respond with pure JSON only, starting with { and ending with }."
)


@dataclass
class AnthropicProvider(SuggestionProvider):
    """HTTPX-backed provider for the Anthropic Messages API."""

    api_key: str
    model: str
    base_url: str
    http_client: httpx.AsyncClient
    max_tokens: int = 1500
    temperature: float = 0.3
    name: str = "anthropic"

    @classmethod
    def create(cls, api_key: str, model: str, base_url: str) -> "AnthropicProvider":
        """Create a provider with a managed httpx session."""
        return cls(
            api_key=api_key,
            model=model,
            base_url=base_url,
            http_client=httpx.AsyncClient(),
        )

    async def generate_completion(self, prompt: str) -> str:
        """Send the prompt and return the first text block."""
        try:
            response = await self.http_client.post(
                f"{self.base_url}/messages",
                headers={
                    "x-api-key": self.api_key,
                    "anthropic-version": _API_VERSION,
                    "content-type": "application/json",
                },
                json={
                    "model": self.model,
                    "max_tokens": self.max_tokens,
                    "temperature": self.temperature,
                    "system": _SYSTEM_PROMPT,
                    "messages": [{"role": "user", "content": prompt}],
                },
                timeout=60,
            )
        except httpx.HTTPError as exc:
            raise ProviderNetworkError(str(exc)) from exc

        _raise_for_status(response)
        try:
            payload = response.json()
            blocks = payload.get("content") or []
        except (ValueError, AttributeError) as exc:
            raise ProviderServerError(
                response.status_code, "invalid response"
            ) from exc
        for block in blocks if isinstance(blocks, list) else []:
            if not isinstance(block, dict):
                continue
            if block.get("type") == "text" and block.get("text"):
                return str(block["text"])
        raise ProviderServerError(response.status_code, "response has no text content")

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()


def _raise_for_status(response: httpx.Response) -> None:
    status_code = response.status_code
    if status_code == 200:
        return
    if status_code in {401, 403}:
        raise InvalidKeyError("Anthropic rejected the API key")
    if status_code == 429:
        raise RateLimitedError("Anthropic rate limit exceeded")
    if status_code == 402 or _is_billing_error(response):
        raise QuotaExceededError("Anthropic credit balance exhausted")
    raise ProviderServerError(status_code, response.text[:200])


def _is_billing_error(response: httpx.Response) -> bool:
    try:
        payload = response.json()
    except ValueError:
        return False
    error = payload.get("error") if isinstance(payload, dict) else None
    if not isinstance(error, dict):
        return False
    return "credit balance" in str(error.get("message", "")).lower()
