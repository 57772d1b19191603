"""Tests for scorecards and argument similarity."""

import pytest

from logos_api.insights import build_scorecard, compute_similarity
from logos_api.models import validate_analysis


def make_result(valid_analysis, **changes):
    return validate_analysis({**valid_analysis, **changes}, strict=True)


class TestScorecard:
    def test_reference_analysis(self, valid_analysis):
        card = build_scorecard(make_result(valid_analysis))

        assert card.coherence == 76
        assert card.support == 59
        assert card.fallacyRisk == 82
        assert card.summary == (
            "Could benefit from additional supporting evidence. "
            "Minor fallacy risk worth addressing. "
            "Considers opposing viewpoints."
        )

    def test_tone_peaks_for_moderate_emotion(self, valid_analysis):
        calm = make_result(valid_analysis, emotions={"Anger": 3, "Sadness": 2, "Joy": 3, "Fear": 2, "Surprise": 2})
        heated = make_result(valid_analysis, emotions={"Anger": 5, "Sadness": 5, "Joy": 5, "Fear": 5, "Surprise": 5})

        assert build_scorecard(calm).tone > build_scorecard(heated).tone
        assert 0 <= build_scorecard(heated).tone < 50

    def test_bare_argument(self, valid_analysis):
        result = make_result(valid_analysis, premises=[], fallacies=None, counterArguments=None)
        card = build_scorecard(result)

        assert card.coherence == 60
        assert card.support == 35
        assert card.fallacyRisk == 100
        assert card.summary.startswith("Needs evidence")

    def test_many_fallacies_are_capped(self, valid_analysis):
        fallacies = [{"name": f"F{i}", "explanation": "e"} for i in range(6)]
        card = build_scorecard(make_result(valid_analysis, fallacies=fallacies))

        assert card.fallacyRisk == 30
        assert "High fallacy risk" in card.summary


class TestSimilarity:
    def test_identical(self):
        assert compute_similarity("Cars pollute cities", "cars pollute CITIES!") == 1.0

    def test_disjoint(self):
        assert compute_similarity("Cars pollute cities", "Bicycles are healthy") == 0.0

    def test_short_words_are_ignored(self):
        assert compute_similarity("a an of to", "a an of to") == 0.0

    def test_partial_overlap(self):
        assert compute_similarity("ban cars now", "ban cars later") == pytest.approx(2 / 4)
