"""
Shared plumbing for upstream LLM providers.
"""
from __future__ import annotations

from typing import Any, Optional

import httpx
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from logos_api.config import Settings, get_settings, logger
from logos_api.errors import MissingCredentialError, UpstreamHTTPError
from logos_api.system_instruction import SYSTEM_INSTRUCTION


class BaseProvider:
    """
    One upstream LLM API.

    Subclasses turn argument text into the provider's request envelope and
    return the assistant's raw text reply from ``complete``.
    """

    name: str = ""
    label: str = ""
    api_key_env: str = ""
    # Run the non-JSON / non-English guard before parsing replies
    guard_garbage: bool = False

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    @property
    def api_key(self) -> str:
        return getattr(self.settings, self.api_key_env, "") or ""

    def is_available(self) -> bool:
        return bool(self.api_key)

    def ensure_credentials(self) -> None:
        if not self.api_key:
            raise MissingCredentialError(
                f"{self.label} API key is missing. Set {self.api_key_env} in the environment.",
                provider=self.name,
            )

    def display_name(self, sub_model_id: Optional[str] = None) -> str:
        return self.label

    async def complete(self, text: str, sub_model_id: Optional[str] = None) -> str:
        raise NotImplementedError

    async def close(self) -> None:
        pass


class ChatCompletionsProvider(BaseProvider):
    """Provider reached by a manual POST of a chat-completions payload."""

    BASE_URL: str = ""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(settings)
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def _model_id(self, sub_model_id: Optional[str]) -> str:
        raise NotImplementedError

    def _payload(self, text: str, model: str) -> dict[str, Any]:
        return {
            "model": model,
            "messages": [
                {"role": "system", "content": SYSTEM_INSTRUCTION},
                {"role": "user", "content": text},
            ],
            "temperature": self.settings.TEMPERATURE,
            "max_tokens": self.settings.MAX_TOKENS,
            "response_format": {"type": "json_object"},
        }

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.settings.PROVIDER_TIMEOUT_SECONDS),
                headers=self._headers(),
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    def _retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            stop=stop_after_attempt(self.settings.PROVIDER_MAX_RETRIES + 1),
            wait=wait_exponential(multiplier=1, min=1, max=4),
            retry=retry_if_exception_type(httpx.NetworkError),
            reraise=True,
        )

    async def _make_request(self, payload: dict[str, Any]) -> httpx.Response:
        async for attempt in self._retrying():
            with attempt:
                client = await self._get_client()
                return await client.post(self.BASE_URL, json=payload)

    async def complete(self, text: str, sub_model_id: Optional[str] = None) -> str:
        model = self._model_id(sub_model_id)
        try:
            response = await self._make_request(self._payload(text, model))
        except httpx.TimeoutException as exc:
            logger.error("%s request timed out after %ss", self.label, self.settings.PROVIDER_TIMEOUT_SECONDS)
            raise UpstreamHTTPError(f"{self.label} API request timed out", provider=self.name) from exc
        except httpx.HTTPError as exc:
            logger.error("%s transport error: %s", self.label, exc)
            raise UpstreamHTTPError(f"{self.label} API is unreachable", provider=self.name) from exc

        if response.status_code != 200:
            error_detail = response.text
            try:
                error_detail = response.json().get("error", {}).get("message", error_detail)
            except (ValueError, AttributeError):
                pass
            logger.error("%s API error (%d): %s", self.label, response.status_code, str(error_detail)[:500])
            raise UpstreamHTTPError(
                f"{self.label} API error ({response.status_code})",
                provider=self.name,
                status_code=response.status_code,
            )

        try:
            data = response.json()
            content = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError):
            content = None
        return content or ""
