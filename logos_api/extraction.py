"""
Best-effort recovery of a JSON object from free-form model output.
"""
from __future__ import annotations

import json
import re
from typing import Any, Optional

from logos_api.errors import JSONExtractionError

_FENCED_JSON = re.compile(r"```(?:json)?\s*\n?(.*?)\n?```", re.DOTALL)
_BRACE_BLOCK = re.compile(r"\{[\s\S]*\}")
_NON_ASCII = re.compile(r"[^\x00-\x7F]")

# Share of non-ASCII characters above which a reply is treated as garbage
MAX_NON_ASCII_RATIO = 0.5


def _loads_object(candidate: str) -> Optional[dict[str, Any]]:
    try:
        data = json.loads(candidate)
    except json.JSONDecodeError:
        return None
    return data if isinstance(data, dict) else None


def extract_json(text: str, provider: Optional[str] = None) -> dict[str, Any]:
    """
    Extract a JSON object from a model reply.

    Tries a direct parse first, then a fenced code block, then the span from
    the first ``{`` to the last ``}``.

    Raises:
        JSONExtractionError: If no JSON object can be recovered
    """
    text = (text or "").strip()

    data = _loads_object(text)
    if data is not None:
        return data

    fenced = _FENCED_JSON.search(text)
    if fenced:
        data = _loads_object(fenced.group(1).strip())
        if data is not None:
            return data

    match = _BRACE_BLOCK.search(text)
    if not match:
        raise JSONExtractionError("Could not extract JSON from model response", provider=provider)

    data = _loads_object(match.group(0))
    if data is None:
        raise JSONExtractionError("Failed to parse JSON from model response", provider=provider)
    return data


def looks_like_garbage(text: str) -> bool:
    """True when a reply has no JSON object start or is mostly non-ASCII."""
    if not text or "{" not in text:
        return True
    return len(_NON_ASCII.findall(text)) / len(text) > MAX_NON_ASCII_RATIO
