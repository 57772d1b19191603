"""Tests for request models and analysis schema validation."""

import pytest
from pydantic import ValidationError

from logos_api.errors import SchemaValidationError
from logos_api.models import (
    NEUTRAL_EMOTION_SCORE,
    AnalyzeRequest,
    CompareRequest,
    describe_validation_error,
    validate_analysis,
)


class TestValidateAnalysis:
    def test_full_reply_round_trips(self, valid_analysis):
        result = validate_analysis(valid_analysis, strict=True)
        assert result.to_payload() == valid_analysis

    def test_minimal_reply(self):
        data = {
            "claim": "C",
            "premises": ["P1"],
            "emotions": {"Anger": 1, "Sadness": 1, "Joy": 1, "Fear": 1, "Surprise": 1},
        }
        result = validate_analysis(data, strict=True)

        assert result.claim == "C"
        assert result.fallacies is None
        assert result.to_payload() == data

    def test_missing_claim_fails(self, valid_analysis):
        del valid_analysis["claim"]

        with pytest.raises(SchemaValidationError) as exc_info:
            validate_analysis(valid_analysis, strict=True)
        assert "claim" in exc_info.value.details

    def test_missing_claim_fails_in_lenient_mode(self, valid_analysis):
        del valid_analysis["claim"]
        with pytest.raises(SchemaValidationError):
            validate_analysis(valid_analysis, strict=False)

    def test_premises_must_be_strings(self, valid_analysis):
        valid_analysis["premises"] = [{"text": "P1"}]
        with pytest.raises(SchemaValidationError):
            validate_analysis(valid_analysis, strict=True)

    def test_strict_requires_every_emotion(self, valid_analysis):
        del valid_analysis["emotions"]["Fear"]

        with pytest.raises(SchemaValidationError) as exc_info:
            validate_analysis(valid_analysis, strict=True)
        assert "emotions.Fear" in exc_info.value.details

    def test_strict_requires_emotions_object(self, valid_analysis):
        del valid_analysis["emotions"]
        with pytest.raises(SchemaValidationError):
            validate_analysis(valid_analysis, strict=True)

    def test_lenient_fills_missing_emotions_with_neutral_score(self, valid_analysis):
        valid_analysis["emotions"] = {"Anger": 5}

        result = validate_analysis(valid_analysis, strict=False)

        assert result.emotions.Anger == 5
        assert result.emotions.Fear == NEUTRAL_EMOTION_SCORE
        assert result.emotions.Joy == NEUTRAL_EMOTION_SCORE

    def test_lenient_accepts_absent_emotions(self, valid_analysis):
        del valid_analysis["emotions"]

        result = validate_analysis(valid_analysis, strict=False)

        assert set(result.emotions.model_dump().values()) == {NEUTRAL_EMOTION_SCORE}

    @pytest.mark.parametrize("strict", [True, False])
    @pytest.mark.parametrize("score", [0, 6, 2.5, "high"])
    def test_out_of_range_scores_fail(self, valid_analysis, strict, score):
        valid_analysis["emotions"]["Joy"] = score
        with pytest.raises(SchemaValidationError):
            validate_analysis(valid_analysis, strict=strict)

    @pytest.mark.parametrize("strict", [True, False])
    @pytest.mark.parametrize("score", ["3", True, 3.5, 3.0])
    def test_mistyped_scores_fail(self, valid_analysis, strict, score):
        valid_analysis["emotions"]["Anger"] = score

        with pytest.raises(SchemaValidationError) as exc_info:
            validate_analysis(valid_analysis, strict=strict)
        assert "emotions.Anger" in exc_info.value.details

    def test_fallacies_are_checked_structurally(self, valid_analysis):
        valid_analysis["fallacies"] = [{"name": "Straw Man"}]
        with pytest.raises(SchemaValidationError):
            validate_analysis(valid_analysis, strict=True)

    def test_critical_evaluation_requires_strength(self, valid_analysis):
        del valid_analysis["criticalEvaluation"]["strength"]
        with pytest.raises(SchemaValidationError):
            validate_analysis(valid_analysis, strict=True)

    def test_non_object_is_rejected(self):
        with pytest.raises(SchemaValidationError):
            validate_analysis(["claim"], strict=True)

    def test_unknown_keys_are_dropped(self, valid_analysis):
        valid_analysis["confidence"] = 0.9
        result = validate_analysis(valid_analysis, strict=True)
        assert "confidence" not in result.to_payload()

    def test_strictness_defaults_to_settings(self, valid_analysis):
        del valid_analysis["emotions"]["Surprise"]
        with pytest.raises(SchemaValidationError):
            validate_analysis(valid_analysis)

    def test_result_is_immutable(self, valid_analysis):
        result = validate_analysis(valid_analysis, strict=True)
        with pytest.raises(ValidationError):
            result.claim = "changed"


class TestAnalyzeRequest:
    def test_valid_request(self):
        req = AnalyzeRequest.model_validate({"text": "Taxes are theft.", "model": "openai"})

        assert req.model == "openai"
        assert req.openRouterModel is None

    @pytest.mark.parametrize("text", ["", "   \n"])
    def test_blank_text_is_rejected(self, text):
        with pytest.raises(ValidationError) as exc_info:
            AnalyzeRequest.model_validate({"text": text, "model": "openai"})
        assert "Argument text is required" in describe_validation_error(exc_info.value)

    def test_unknown_provider_is_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            AnalyzeRequest.model_validate({"text": "x", "model": "claude"})
        assert "model" in describe_validation_error(exc_info.value)

    def test_degenerate_text_is_rejected(self):
        with pytest.raises(ValidationError):
            AnalyzeRequest.model_validate({"text": "a" * 600, "model": "openai"})

    def test_openrouter_requires_sub_model(self):
        with pytest.raises(ValidationError) as exc_info:
            AnalyzeRequest.model_validate({"text": "x", "model": "openrouter"})
        assert "openRouterModel is required" in describe_validation_error(exc_info.value)

    def test_openrouter_sub_model_must_be_allowed(self):
        with pytest.raises(ValidationError) as exc_info:
            AnalyzeRequest.model_validate(
                {"text": "x", "model": "openrouter", "openRouterModel": "evil/model"}
            )
        assert "not enabled" in describe_validation_error(exc_info.value)

    def test_openrouter_allowed_sub_model(self):
        req = AnalyzeRequest.model_validate(
            {"text": "x", "model": "openrouter", "openRouterModel": "openai/gpt-4o-mini"}
        )
        assert req.openRouterModel == "openai/gpt-4o-mini"

    def test_sub_model_ignored_for_other_providers(self):
        req = AnalyzeRequest.model_validate({"text": "x", "model": "gemini", "openRouterModel": "evil/model"})
        assert req.model == "gemini"


class TestCompareRequest:
    def test_both_sides_required(self):
        with pytest.raises(ValidationError) as exc_info:
            CompareRequest.model_validate({"left": "A claim", "right": " ", "model": "openai"})
        assert "right: Argument text is required" in describe_validation_error(exc_info.value)
