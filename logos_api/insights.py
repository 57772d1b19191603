"""
Heuristic scorecards and text similarity for comparing arguments.
"""
from __future__ import annotations

import re

from logos_api.models import AnalysisResult, Scorecard

_NON_ALNUM = re.compile(r"[^a-z0-9\s]")


def _clamp(value: float) -> int:
    return max(0, min(100, round(value)))


def build_scorecard(result: AnalysisResult) -> Scorecard:
    """Rate coherence, support, tone and fallacy risk on a 0-100 scale."""
    has_claim = bool(result.claim.strip())
    premise_count = sum(1 for p in result.premises if p.strip())
    fallacy_count = len(result.fallacies or [])
    counter_count = len(result.counterArguments or [])

    coherence = _clamp(
        (60 if has_claim else 40) + min(premise_count * 6, 30) + min(counter_count * 4, 10)
    )
    support = _clamp(35 + min(premise_count * 12, 55))

    scores = list(result.emotions.model_dump().values()) if result.emotions else []
    avg_emotion = sum(scores) / len(scores) if scores else 0
    tone = _clamp(80 - abs(avg_emotion - 2.5) * 15)

    fallacy_risk = _clamp(100 - min(fallacy_count * 18, 70))

    insights = []
    if premise_count >= 3:
        insights.append("Well supported with multiple premises.")
    elif premise_count == 0:
        insights.append("Needs evidence to back up the main claim.")
    else:
        insights.append("Could benefit from additional supporting evidence.")

    if fallacy_count == 0:
        insights.append("No fallacies detected, strong logical footing.")
    elif fallacy_count <= 2:
        insights.append("Minor fallacy risk worth addressing.")
    else:
        insights.append("High fallacy risk, review reasoning carefully.")

    if counter_count > 0:
        insights.append("Considers opposing viewpoints.")

    return Scorecard(
        coherence=coherence,
        support=support,
        tone=tone,
        fallacyRisk=fallacy_risk,
        summary=" ".join(insights),
    )


def _tokenize(text: str) -> set[str]:
    cleaned = _NON_ALNUM.sub(" ", text.lower())
    return {token for token in cleaned.split() if len(token) > 2}


def compute_similarity(text_a: str, text_b: str) -> float:
    """Jaccard similarity of the word sets of two texts."""
    tokens_a = _tokenize(text_a)
    tokens_b = _tokenize(text_b)
    if not tokens_a or not tokens_b:
        return 0.0
    return len(tokens_a & tokens_b) / len(tokens_a | tokens_b)
