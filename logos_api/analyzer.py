"""
Dispatcher that routes an argument to a provider and normalizes the reply.
"""
from __future__ import annotations

from typing import Optional

from logos_api.config import Settings, get_settings, logger
from logos_api.errors import (
    EmptyResponseError,
    InvalidRequestError,
    JSONExtractionError,
    SchemaValidationError,
    SubModelNotAllowedError,
    UpstreamContentError,
)
from logos_api.extraction import extract_json, looks_like_garbage
from logos_api.models import AnalysisResult, validate_analysis
from logos_api.provider_config import AGGREGATOR_PROVIDER, ProviderConfig, get_provider_config, is_allowed
from logos_api.providers import BaseProvider, build_providers


class ArgumentAnalyzer:
    """
    Argument analyzer backed by several LLM providers.

    Takes argument text and a provider name, returns a validated
    ``AnalysisResult`` labelled with the model that answered.
    """

    def __init__(
        self,
        providers: Optional[dict[str, BaseProvider]] = None,
        provider_config: Optional[ProviderConfig] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.providers = providers if providers is not None else build_providers(self.settings)
        self._provider_config = provider_config

    @property
    def provider_config(self) -> ProviderConfig:
        return self._provider_config or get_provider_config()

    async def close(self) -> None:
        """Close provider connections."""
        for provider in self.providers.values():
            await provider.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    def _select(self, provider_name: str, sub_model_id: Optional[str]) -> BaseProvider:
        provider = self.providers.get(provider_name)
        if provider is None:
            raise InvalidRequestError(f"Unsupported AI model: {provider_name}")

        if provider_name == AGGREGATOR_PROVIDER and not is_allowed(sub_model_id, self.provider_config):
            logger.warning("Rejected OpenRouter sub-model %r (not in allow-list)", sub_model_id)
            raise SubModelNotAllowedError(sub_model_id or "")

        provider.ensure_credentials()
        return provider

    async def analyze(
        self,
        text: str,
        provider: str,
        sub_model_id: Optional[str] = None,
    ) -> AnalysisResult:
        """
        Analyze an argument.

        Args:
            text: Argument text
            provider: One of openai, deepseek, gemini, openrouter
            sub_model_id: OpenRouter model id (required for openrouter)

        Returns:
            AnalysisResult with ``modelName`` set

        Raises:
            InvalidRequestError: Unknown provider or disallowed sub-model
            MissingCredentialError: Provider has no API key configured
            UpstreamHTTPError: Provider call failed or timed out
            UpstreamContentError: Reply was empty, not JSON, or schema-invalid
        """
        if not text or not text.strip():
            raise InvalidRequestError("Argument text is required")

        selected = self._select(provider, sub_model_id)
        label = selected.display_name(sub_model_id)

        raw = await selected.complete(text.strip(), sub_model_id)
        logger.debug("Raw %s response: %s", selected.name, raw[:500])

        try:
            if not raw.strip():
                raise EmptyResponseError(f"{selected.label} returned an empty response", provider=selected.name)

            if selected.guard_garbage and looks_like_garbage(raw):
                raise UpstreamContentError(
                    f"{label} returned a non-JSON response. Please try again or pick another model.",
                    provider=selected.name,
                )

            try:
                data = extract_json(raw, provider=selected.name)
            except JSONExtractionError as exc:
                raise JSONExtractionError(
                    f"Failed to parse JSON response from {selected.label}. Please try again.",
                    provider=selected.name,
                ) from exc

            try:
                result = validate_analysis(data, strict=self.settings.STRICT_EMOTIONS, provider=selected.name)
            except SchemaValidationError as exc:
                raise SchemaValidationError(
                    f"Invalid response format from {selected.label}. Please try again.",
                    details=exc.details,
                    provider=selected.name,
                ) from exc
        except UpstreamContentError as exc:
            logger.error(
                "Upstream content error from %s: %s %s | excerpt: %s",
                selected.name,
                exc.message,
                getattr(exc, "details", ""),
                raw[:500],
            )
            raise

        return result.model_copy(update={"modelName": label})
