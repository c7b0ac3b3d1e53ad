"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    fdc_api_key: str
    fdc_base_url: str = "https://api.nal.usda.gov/fdc/v1"
    fdc_data_types: str = "Foundation,SR Legacy"
    anthropic_api_key: str | None = None
    anthropic_model: str = "claude-sonnet-4-20250514"
    anthropic_base_url: str = "https://api.anthropic.com/v1"
    openai_api_key: str | None = None
    openai_model: str = "gpt-4o-mini"
    openrouter_api_key: str | None = None
    openrouter_model: str = "openai/gpt-4o-mini"
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    provider_order: str = "anthropic,openai,openrouter,template"
    max_retained_runs: int = 20
    operator_token: str
    selection_timeout_seconds: float = 900.0
    ingredient_lookback_days: int = 3
    cuisine_lookback_days: int = 2
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_csv(raw: str | None) -> list[str]:
    """Split a comma-separated setting into trimmed, non-empty entries."""
    if raw is None:
        return []
    values: list[str] = []
    for chunk in raw.split(","):
        value = chunk.strip()
        if value:
            values.append(value)
    return values
