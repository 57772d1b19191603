"""
OpenRouter provider: one endpoint fronting many models chosen by id.

Free-tier models behind OpenRouter do not reliably honor JSON mode and
occasionally answer in another language, so replies go through the
garbage guard before parsing.
"""
from __future__ import annotations

from typing import Any, Optional

from logos_api.errors import SubModelNotAllowedError
from logos_api.providers.base import ChatCompletionsProvider

MODEL_LABELS = {
    "mistralai/mistral-7b-instruct:free": "Mistral 7B Instruct",
    "meta-llama/llama-3.3-70b-instruct:free": "Llama 3.3 70B Instruct",
    "google/gemini-2.5-pro-exp-03-25:free": "Gemini 2.5 Pro Experimental",
    "deepseek/deepseek-r1-zero:free": "DeepSeek R1 Zero",
    "openai/gpt-4o-mini": "GPT-4o mini",
}


class OpenRouterProvider(ChatCompletionsProvider):
    name = "openrouter"
    label = "OpenRouter"
    api_key_env = "OPENROUTER_API_KEY"
    guard_garbage = True

    BASE_URL = "https://openrouter.ai/api/v1/chat/completions"

    def _headers(self) -> dict[str, str]:
        headers = super()._headers()
        headers["HTTP-Referer"] = self.settings.OPENROUTER_REFERER
        headers["X-Title"] = self.settings.OPENROUTER_TITLE
        return headers

    def _model_id(self, sub_model_id: Optional[str]) -> str:
        if not sub_model_id:
            raise SubModelNotAllowedError("")
        return sub_model_id

    def _payload(self, text: str, model: str) -> dict[str, Any]:
        payload = super()._payload(text, model)
        # Many routed models reject response_format; the prompt demands JSON instead
        payload.pop("response_format", None)
        return payload

    def display_name(self, sub_model_id: Optional[str] = None) -> str:
        if not sub_model_id:
            return self.label
        return f"{MODEL_LABELS.get(sub_model_id, sub_model_id)} (via OpenRouter)"
