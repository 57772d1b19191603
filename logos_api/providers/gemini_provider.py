"""
Gemini provider for argument analysis.
"""
from __future__ import annotations

import asyncio
from typing import Any, Optional

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from logos_api.config import Settings, logger
from logos_api.errors import UpstreamHTTPError
from logos_api.providers.base import BaseProvider
from logos_api.system_instruction import SYSTEM_INSTRUCTION

MODEL_LABELS = {
    "gemini-2.5-flash": "Gemini 2.5 Flash",
    "gemini-2.5-flash-lite": "Gemini 2.5 Flash Lite",
    "gemini-2.5-pro": "Gemini 2.5 Pro",
}


def first_candidate_text(response: Any) -> str:
    """Return ``candidates[0].content.parts[0].text`` or an empty string."""
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return ""
    content = getattr(candidates[0], "content", None)
    parts = getattr(content, "parts", None) or []
    if not parts:
        return ""
    return getattr(parts[0], "text", None) or ""


class GeminiProvider(BaseProvider):
    """
    Gemini provider using the google-genai SDK.
    """

    name = "gemini"
    label = "Gemini"
    api_key_env = "GEMINI_API_KEY"

    def __init__(self, settings: Optional[Settings] = None):
        super().__init__(settings)
        self._client: genai.Client | None = None

    def _get_client(self) -> genai.Client:
        if self._client is None:
            self._client = genai.Client(api_key=self.api_key)
            logger.info("Gemini client initialized (model=%s)", self.settings.GEMINI_MODEL)
        return self._client

    def display_name(self, sub_model_id: Optional[str] = None) -> str:
        model = self.settings.GEMINI_MODEL
        return MODEL_LABELS.get(model, model)

    async def complete(self, text: str, sub_model_id: Optional[str] = None) -> str:
        client = self._get_client()
        timeout = self.settings.PROVIDER_TIMEOUT_SECONDS

        try:
            response = await asyncio.wait_for(
                client.aio.models.generate_content(
                    model=self.settings.GEMINI_MODEL,
                    contents=[types.Content(role="user", parts=[types.Part(text=text)])],
                    config=types.GenerateContentConfig(
                        system_instruction=SYSTEM_INSTRUCTION,
                        temperature=self.settings.TEMPERATURE,
                        max_output_tokens=self.settings.MAX_TOKENS,
                        response_mime_type="application/json",
                    ),
                ),
                timeout=timeout,
            )
        except asyncio.TimeoutError as exc:
            logger.error("Gemini API timeout after %ss", timeout)
            raise UpstreamHTTPError("Gemini API request timed out", provider=self.name) from exc
        except genai_errors.APIError as exc:
            logger.error("Gemini API error (%s): %s", exc.code, str(exc.message)[:500])
            raise UpstreamHTTPError(
                f"Gemini API error ({exc.code})",
                provider=self.name,
                status_code=exc.code,
            ) from exc
        except httpx.TimeoutException as exc:
            logger.error("Gemini transport timeout: %s", exc)
            raise UpstreamHTTPError("Gemini API request timed out", provider=self.name) from exc
        except httpx.HTTPError as exc:
            logger.error("Gemini transport error: %s", exc)
            raise UpstreamHTTPError("Gemini API is unreachable", provider=self.name) from exc

        content = first_candidate_text(response)
        if not content:
            candidates = getattr(response, "candidates", None) or []
            logger.error(
                "Empty response from Gemini. Finish reason: %s",
                candidates[0].finish_reason if candidates else "Unknown",
            )
        return content
