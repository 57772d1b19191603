"""Upstream LLM providers."""

from typing import Optional

from logos_api.config import Settings, get_settings
from logos_api.providers.base import BaseProvider, ChatCompletionsProvider
from logos_api.providers.deepseek_provider import DeepSeekProvider
from logos_api.providers.gemini_provider import GeminiProvider
from logos_api.providers.openai_provider import OpenAIProvider
from logos_api.providers.openrouter_provider import OpenRouterProvider


def build_providers(settings: Optional[Settings] = None) -> dict[str, BaseProvider]:
    """Instantiate one provider per supported name."""
    settings = settings or get_settings()
    return {
        "openai": OpenAIProvider(settings),
        "deepseek": DeepSeekProvider(settings),
        "gemini": GeminiProvider(settings),
        "openrouter": OpenRouterProvider(settings),
    }


__all__ = [
    "BaseProvider",
    "ChatCompletionsProvider",
    "DeepSeekProvider",
    "GeminiProvider",
    "OpenAIProvider",
    "OpenRouterProvider",
    "build_providers",
]
