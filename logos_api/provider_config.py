"""
Resolution of enabled providers and aggregator sub-models.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Literal, Optional

from pydantic import BaseModel, Field

from logos_api.config import Settings, get_settings, logger

ProviderName = Literal["openai", "deepseek", "gemini", "openrouter"]

SUPPORTED_PROVIDERS: tuple[str, ...] = ("openai", "deepseek", "gemini", "openrouter")
AGGREGATOR_PROVIDER = "openrouter"

DEFAULT_OPENROUTER_MODELS: tuple[str, ...] = (
    "mistralai/mistral-7b-instruct:free",
    "meta-llama/llama-3.3-70b-instruct:free",
    "google/gemini-2.5-pro-exp-03-25:free",
    "deepseek/deepseek-r1-zero:free",
    "openai/gpt-4o-mini",
)


class ProviderConfig(BaseModel):
    """Provider settings exposed to clients via ``GET /api/config``."""

    openRouterModels: list[str] = Field(..., description="Enabled aggregator sub-model ids, in order")
    defaultAIModel: str = Field(..., description="Default provider name")
    defaultOpenRouterModel: str = Field(..., description="Default aggregator sub-model id")


def _split_models(raw: str) -> list[str]:
    return [m.strip() for m in raw.split(",") if m.strip()]


def resolve_config(settings: Optional[Settings] = None) -> ProviderConfig:
    """Build the provider configuration from settings, falling back to built-in defaults."""
    settings = settings or get_settings()

    models = _split_models(settings.OPENROUTER_MODELS) or list(DEFAULT_OPENROUTER_MODELS)

    default_provider = settings.DEFAULT_AI_MODEL.strip() or AGGREGATOR_PROVIDER
    if default_provider not in SUPPORTED_PROVIDERS:
        logger.warning("Unknown DEFAULT_AI_MODEL '%s', using '%s'", default_provider, AGGREGATOR_PROVIDER)
        default_provider = AGGREGATOR_PROVIDER

    default_model = settings.DEFAULT_OPENROUTER_MODEL.strip() or models[0]

    return ProviderConfig(
        openRouterModels=models,
        defaultAIModel=default_provider,
        defaultOpenRouterModel=default_model,
    )


@lru_cache()
def get_provider_config() -> ProviderConfig:
    return resolve_config()


def is_allowed(sub_model_id: Optional[str], config: Optional[ProviderConfig] = None) -> bool:
    """Exact membership check against the aggregator allow-list."""
    if not sub_model_id:
        return False
    config = config or get_provider_config()
    return sub_model_id in config.openRouterModels
