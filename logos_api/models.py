"""
Pydantic models for the Logos API.
"""
from __future__ import annotations

import re
from typing import Annotated, Any, Optional

from pydantic import BaseModel, Field, StrictInt, ValidationError, field_validator, model_validator

from logos_api.config import settings
from logos_api.errors import SchemaValidationError
from logos_api.provider_config import AGGREGATOR_PROVIDER, ProviderName, is_allowed

EMOTION_LABELS: tuple[str, ...] = ("Anger", "Sadness", "Joy", "Fear", "Surprise")
NEUTRAL_EMOTION_SCORE = 3

# Whole numbers only: "3", true and 3.0 are rejected
EmotionScore = Annotated[StrictInt, Field(ge=1, le=5)]


def validate_argument_text(value: str) -> str:
    """Reject blank, oversized or degenerate argument text."""
    if not value or not value.strip():
        raise ValueError("Argument text is required")
    if len(value) > settings.MAX_TEXT_LENGTH:
        raise ValueError(f"Argument text exceeds {settings.MAX_TEXT_LENGTH} characters")
    if re.search(r"(.)\1{500,}", value):
        raise ValueError("Invalid argument text content")
    return value


def describe_validation_error(exc: ValidationError) -> str:
    """Flatten a pydantic ValidationError into one readable line."""
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "__root__")
        msg = err.get("msg", "invalid value")
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        parts.append(f"{loc}: {msg}" if loc else msg)
    return "; ".join(parts)


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class _ProviderChoice(BaseModel):
    model: ProviderName = Field(..., description="Provider that runs the analysis")
    openRouterModel: Optional[str] = Field(default=None, description="Aggregator sub-model id")

    @model_validator(mode="after")
    def check_sub_model(self):
        if self.model != AGGREGATOR_PROVIDER:
            return self
        if not self.openRouterModel:
            raise ValueError("openRouterModel is required when model is 'openrouter'")
        if not is_allowed(self.openRouterModel):
            raise ValueError(f"Model '{self.openRouterModel}' is not enabled for OpenRouter")
        return self


class AnalyzeRequest(_ProviderChoice):
    """Request payload for argument analysis."""
    text: str = Field(..., description="Argument text to analyze")

    @field_validator("text")
    @classmethod
    def validate_text(cls, v: str) -> str:
        return validate_argument_text(v)


class CompareRequest(_ProviderChoice):
    """Request payload for a side-by-side comparison of two arguments."""
    left: str = Field(..., description="First argument")
    right: str = Field(..., description="Second argument")

    @field_validator("left", "right")
    @classmethod
    def validate_sides(cls, v: str) -> str:
        return validate_argument_text(v)


# ---------------------------------------------------------------------------
# Analysis result
# ---------------------------------------------------------------------------


class EmotionScores(BaseModel):
    """Intensity of each core emotion, 1 (absent) to 5 (very high)."""
    Anger: EmotionScore
    Sadness: EmotionScore
    Joy: EmotionScore
    Fear: EmotionScore
    Surprise: EmotionScore


class Fallacy(BaseModel):
    name: str = Field(..., description="Name of the suspected fallacy")
    explanation: str = Field(..., description="Why the reasoning may be fallacious here")


class CriticalEvaluation(BaseModel):
    weaknesses: list[str]
    assumptions: list[str]
    strength: str = Field(..., description="Overall logical strength, e.g. Weak, Moderate, Strong")


class AnalysisResult(BaseModel):
    """Normalized analysis returned by every provider."""
    claim: str = Field(..., description="Main claim or conclusion")
    premises: list[str] = Field(..., description="Supporting premises, in order")
    emotions: EmotionScores
    emotionJustification: Optional[str] = None
    fallacies: Optional[list[Fallacy]] = None
    structureMap: Optional[str] = None
    criticalEvaluation: Optional[CriticalEvaluation] = None
    counterArguments: Optional[list[str]] = None
    modelName: Optional[str] = Field(default=None, description="Display name of the model that answered")

    model_config = {"frozen": True}

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


def _fill_missing_emotions(data: dict[str, Any]) -> dict[str, Any]:
    emotions = data.get("emotions")
    if emotions is None:
        emotions = {}
    if not isinstance(emotions, dict):
        return data
    filled = {label: NEUTRAL_EMOTION_SCORE for label in EMOTION_LABELS}
    filled.update(emotions)
    return {**data, "emotions": filled}


def validate_analysis(
    candidate: Any,
    strict: Optional[bool] = None,
    provider: Optional[str] = None,
) -> AnalysisResult:
    """
    Validate a provider reply against the analysis schema.

    In strict mode all five emotion scores are required. In lenient mode a
    missing or partial ``emotions`` object is completed with the neutral
    score; values that are present must still be integers from 1 to 5.

    Raises:
        SchemaValidationError: If a required field is missing or mistyped
    """
    if strict is None:
        strict = settings.STRICT_EMOTIONS

    if not isinstance(candidate, dict):
        raise SchemaValidationError(
            "Invalid response format: expected a JSON object",
            details=f"got {type(candidate).__name__}",
            provider=provider,
        )

    data = candidate if strict else _fill_missing_emotions(candidate)

    try:
        return AnalysisResult.model_validate(data)
    except ValidationError as exc:
        raise SchemaValidationError(
            "Invalid response format",
            details=describe_validation_error(exc),
            provider=provider,
        ) from exc


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class Scorecard(BaseModel):
    """Heuristic 0-100 ratings derived from an analysis."""
    coherence: int = Field(..., ge=0, le=100)
    support: int = Field(..., ge=0, le=100)
    tone: int = Field(..., ge=0, le=100)
    fallacyRisk: int = Field(..., ge=0, le=100)
    summary: str


class ComparisonSide(BaseModel):
    text: str
    result: dict[str, Any]
    scorecard: Scorecard


class CompareResponse(BaseModel):
    left: ComparisonSide
    right: ComparisonSide
    similarity: float = Field(..., ge=0.0, le=1.0)


class ErrorResponse(BaseModel):
    """Error response."""
    message: str = Field(..., description="Error message")
