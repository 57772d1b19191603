"""
OpenAI provider using the official SDK in JSON mode.
"""
from __future__ import annotations

from typing import Optional

import openai
from openai import AsyncOpenAI

from logos_api.config import Settings, logger
from logos_api.errors import UpstreamHTTPError
from logos_api.providers.base import BaseProvider
from logos_api.system_instruction import SYSTEM_INSTRUCTION

MODEL_LABELS = {
    "gpt-4o": "GPT-4o",
    "gpt-4o-mini": "GPT-4o mini",
    "gpt-4.1": "GPT-4.1",
    "gpt-4.1-mini": "GPT-4.1 mini",
}


class OpenAIProvider(BaseProvider):
    name = "openai"
    label = "OpenAI"
    api_key_env = "OPENAI_API_KEY"

    def __init__(self, settings: Optional[Settings] = None):
        super().__init__(settings)
        self._client: Optional[AsyncOpenAI] = None

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self.api_key,
                timeout=self.settings.PROVIDER_TIMEOUT_SECONDS,
                max_retries=self.settings.PROVIDER_MAX_RETRIES,
            )
        return self._client

    def display_name(self, sub_model_id: Optional[str] = None) -> str:
        model = self.settings.OPENAI_MODEL
        return MODEL_LABELS.get(model, model)

    async def complete(self, text: str, sub_model_id: Optional[str] = None) -> str:
        client = self._get_client()
        try:
            response = await client.chat.completions.create(
                model=self.settings.OPENAI_MODEL,
                messages=[
                    {"role": "system", "content": SYSTEM_INSTRUCTION},
                    {"role": "user", "content": text},
                ],
                temperature=self.settings.TEMPERATURE,
                max_tokens=self.settings.MAX_TOKENS,
                response_format={"type": "json_object"},
            )
        except openai.APITimeoutError as exc:
            logger.error("OpenAI request timed out after %ss", self.settings.PROVIDER_TIMEOUT_SECONDS)
            raise UpstreamHTTPError("OpenAI API request timed out", provider=self.name) from exc
        except openai.APIStatusError as exc:
            logger.error("OpenAI API error (%d): %s", exc.status_code, str(exc.message)[:500])
            raise UpstreamHTTPError(
                f"OpenAI API error ({exc.status_code})",
                provider=self.name,
                status_code=exc.status_code,
            ) from exc
        except openai.APIConnectionError as exc:
            logger.error("OpenAI transport error: %s", exc)
            raise UpstreamHTTPError("OpenAI API is unreachable", provider=self.name) from exc

        if not response.choices:
            return ""
        return response.choices[0].message.content or ""

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None
