"""
DeepSeek provider (OpenAI-compatible chat completions over plain HTTP).
"""
from __future__ import annotations

from typing import Optional

from logos_api.providers.base import ChatCompletionsProvider

MODEL_LABELS = {
    "deepseek-chat": "DeepSeek Chat",
    "deepseek-reasoner": "DeepSeek Reasoner",
}


class DeepSeekProvider(ChatCompletionsProvider):
    name = "deepseek"
    label = "DeepSeek"
    api_key_env = "DEEPSEEK_API_KEY"

    BASE_URL = "https://api.deepseek.com/v1/chat/completions"

    def _model_id(self, sub_model_id: Optional[str]) -> str:
        return self.settings.DEEPSEEK_MODEL

    def display_name(self, sub_model_id: Optional[str] = None) -> str:
        model = self.settings.DEEPSEEK_MODEL
        return MODEL_LABELS.get(model, model)
