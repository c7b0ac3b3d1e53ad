"""Tests for the suggestion provider chain."""

import asyncio

import pytest

from tests.conftest import FakeProvider
from verified_meals.domain.errors import (
    AllProvidersUnavailableError,
    InvalidKeyError,
    ProviderNetworkError,
    ProviderServerError,
    QuotaExceededError,
    RateLimitedError,
    SuggestionParseError,
)
from verified_meals.services.providers import SuggestionProviderChain


def _upper(raw: str) -> str:
    return raw.upper()


def test_first_success_wins() -> None:
    first = FakeProvider(name="first", replies=["hello"])
    second = FakeProvider(name="second", replies=["unused"])
    chain = SuggestionProviderChain([first, second])

    provider, parsed = asyncio.run(chain.complete("prompt", _upper))

    assert provider == "first"
    assert parsed == "HELLO"
    assert second.prompts == []


def test_rate_limit_and_quota_skip_silently() -> None:
    chain = SuggestionProviderChain(
        [
            FakeProvider(name="limited", replies=[RateLimitedError("slow down")]),
            FakeProvider(name="broke", replies=[QuotaExceededError("no credit")]),
            FakeProvider(name="down", replies=[ProviderServerError(500)]),
        ]
    )

    with pytest.raises(AllProvidersUnavailableError) as excinfo:
        asyncio.run(chain.complete("prompt", _upper))

    assert excinfo.value.errors == ["down: server error 500"]


def test_other_errors_are_recorded_and_chain_continues() -> None:
    chain = SuggestionProviderChain(
        [
            FakeProvider(name="bad-key", replies=[InvalidKeyError("rejected")]),
            FakeProvider(name="offline", replies=[ProviderNetworkError("timeout")]),
            FakeProvider(name="ok", replies=["fine"]),
        ]
    )

    provider, parsed = asyncio.run(chain.complete("prompt", _upper))

    assert provider == "ok"
    assert parsed == "FINE"


def test_parse_failure_moves_to_next_provider_without_retry() -> None:
    def parser(raw: str) -> str:
        if raw == "garbage":
            raise SuggestionParseError("not json")
        return raw

    flaky = FakeProvider(name="flaky", replies=["garbage", "would be fine"])
    backup = FakeProvider(name="backup", replies=["good"])
    chain = SuggestionProviderChain([flaky, backup])

    provider, parsed = asyncio.run(chain.complete("prompt", parser))

    assert (provider, parsed) == ("backup", "good")
    assert len(flaky.prompts) == 1


def test_all_providers_failing_raises() -> None:
    chain = SuggestionProviderChain(
        [
            FakeProvider(name="a", replies=[ProviderServerError(503, "overloaded")]),
            FakeProvider(name="b", replies=[InvalidKeyError("nope")]),
        ]
    )

    with pytest.raises(AllProvidersUnavailableError) as excinfo:
        asyncio.run(chain.complete("prompt", _upper))

    assert excinfo.value.errors == ["a: server error 503: overloaded", "b: nope"]
    assert "currently unavailable" in str(excinfo.value)


def test_empty_chain_raises() -> None:
    with pytest.raises(AllProvidersUnavailableError):
        asyncio.run(SuggestionProviderChain().complete("prompt", _upper))


def test_names_follow_priority_order() -> None:
    chain = SuggestionProviderChain(
        [FakeProvider(name="anthropic"), FakeProvider(name="template")]
    )
    assert chain.names == ["anthropic", "template"]
