"""
Error taxonomy shared by the dispatcher and the HTTP layer.

Every failure raised while handling an analysis carries an ``ErrorKind``.
The HTTP handler switches on the kind to pick a status code.
"""
from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Category of an analysis failure."""

    CLIENT_INPUT = "client_input"
    RATE_LIMITED = "rate_limited"
    MISSING_CREDENTIAL = "missing_credential"
    UPSTREAM_PROTOCOL = "upstream_protocol"
    UPSTREAM_CONTENT = "upstream_content"


STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.CLIENT_INPUT: 400,
    ErrorKind.MISSING_CREDENTIAL: 401,
    ErrorKind.RATE_LIMITED: 429,
    ErrorKind.UPSTREAM_PROTOCOL: 500,
    ErrorKind.UPSTREAM_CONTENT: 500,
}


class AnalysisError(Exception):
    """Base exception for analysis failures."""

    kind: ErrorKind = ErrorKind.UPSTREAM_PROTOCOL

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        self.message = message
        self.provider = provider
        self.status_code = status_code
        super().__init__(message)

    @property
    def http_status(self) -> int:
        return STATUS_BY_KIND[self.kind]


class InvalidRequestError(AnalysisError):
    """Malformed or missing request fields."""

    kind = ErrorKind.CLIENT_INPUT


class SubModelNotAllowedError(InvalidRequestError):
    """Aggregator sub-model id is not on the configured allow-list."""

    def __init__(self, sub_model_id: str):
        self.sub_model_id = sub_model_id
        super().__init__(
            f"Model '{sub_model_id}' is not enabled for OpenRouter",
            provider="openrouter",
        )


class MissingCredentialError(AnalysisError):
    """The chosen provider has no API key configured."""

    kind = ErrorKind.MISSING_CREDENTIAL


class UpstreamHTTPError(AnalysisError):
    """Provider answered with a non-OK status, timed out, or was unreachable."""

    kind = ErrorKind.UPSTREAM_PROTOCOL


class UpstreamContentError(AnalysisError):
    """Provider answered OK but the content is unusable."""

    kind = ErrorKind.UPSTREAM_CONTENT


class EmptyResponseError(UpstreamContentError):
    pass


class JSONExtractionError(UpstreamContentError):
    pass


class SchemaValidationError(UpstreamContentError):
    """Provider JSON does not match the analysis result schema."""

    def __init__(self, message: str, details: str = "", provider: Optional[str] = None):
        self.details = details
        super().__init__(message, provider=provider)


class RateLimitExceededError(AnalysisError):
    """Client exhausted its request budget for the current window."""

    kind = ErrorKind.RATE_LIMITED

    def __init__(self, limit: int, retry_after: int, reset_time: str):
        self.limit = limit
        self.retry_after = retry_after
        self.reset_time = reset_time
        super().__init__("Rate limit exceeded. Please try again later.")

    def headers(self) -> dict[str, str]:
        return {
            "Retry-After": str(self.retry_after),
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": "0",
            "X-RateLimit-Reset": self.reset_time,
        }
