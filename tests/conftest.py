import json
from collections.abc import AsyncGenerator
from typing import Any, Optional

import pytest
from httpx import ASGITransport, AsyncClient

from logos_api.analyzer import ArgumentAnalyzer
from logos_api.config import Settings
from logos_api.main import app, get_analyzer, get_rate_limiter
from logos_api.provider_config import resolve_config
from logos_api.providers.base import BaseProvider
from logos_api.rate_limiter import FixedWindowRateLimiter

VALID_ANALYSIS: dict[str, Any] = {
    "claim": "Cities should ban cars from their centers",
    "premises": [
        "Cars cause most urban air pollution",
        "Pedestrian zones increase foot traffic for local shops",
    ],
    "emotions": {"Anger": 2, "Sadness": 1, "Joy": 3, "Fear": 1, "Surprise": 1},
    "emotionJustification": "Mildly optimistic tone about pedestrian zones.",
    "fallacies": [
        {"name": "Hasty Generalization", "explanation": "Assumes every city has the same traffic pattern."}
    ],
    "structureMap": "P1 and P2 independently support C.",
    "criticalEvaluation": {
        "weaknesses": ["No data on delivery logistics"],
        "assumptions": ["Public transport can absorb demand"],
        "strength": "Moderate",
    },
    "counterArguments": ["How would emergency services reach the center?"],
}


def make_settings(**overrides) -> Settings:
    values = {
        "OPENAI_API_KEY": "",
        "DEEPSEEK_API_KEY": "",
        "GEMINI_API_KEY": "",
        "OPENROUTER_API_KEY": "",
        "OPENROUTER_MODELS": "",
        "DEFAULT_AI_MODEL": "openrouter",
        "DEFAULT_OPENROUTER_MODEL": "",
        "STRICT_EMOTIONS": True,
        "PROVIDER_TIMEOUT_SECONDS": 5.0,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


class FakeClock:
    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeProvider(BaseProvider):
    """Provider double returning a canned reply and recording calls."""

    api_key_env = "FAKE_API_KEY"

    def __init__(
        self,
        name: str,
        reply: Any = "",
        api_key: str = "test-key",
        guard_garbage: bool = False,
        settings: Optional[Settings] = None,
    ):
        super().__init__(settings or make_settings())
        self.name = name
        self.label = name.title()
        self.reply = reply
        self.guard_garbage = guard_garbage
        self._api_key = api_key
        self.calls: list[tuple[str, Optional[str]]] = []
        self.closed = False

    @property
    def api_key(self) -> str:
        return self._api_key

    def display_name(self, sub_model_id: Optional[str] = None) -> str:
        return f"{self.label} {sub_model_id}" if sub_model_id else f"{self.label} Model"

    async def complete(self, text: str, sub_model_id: Optional[str] = None) -> str:
        self.calls.append((text, sub_model_id))
        if isinstance(self.reply, Exception):
            raise self.reply
        return self.reply

    async def close(self) -> None:
        self.closed = True


def build_fake_analyzer(reply: Any = None, strict: bool = True, **provider_kwargs) -> ArgumentAnalyzer:
    if reply is None:
        reply = json.dumps(VALID_ANALYSIS)
    settings = make_settings(STRICT_EMOTIONS=strict)
    providers = {
        name: FakeProvider(name, reply=reply, guard_garbage=(name == "openrouter"), settings=settings, **provider_kwargs)
        for name in ("openai", "deepseek", "gemini", "openrouter")
    }
    return ArgumentAnalyzer(providers=providers, provider_config=resolve_config(settings), settings=settings)


@pytest.fixture
def valid_analysis() -> dict[str, Any]:
    return json.loads(json.dumps(VALID_ANALYSIS))


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def limiter(clock: FakeClock) -> FixedWindowRateLimiter:
    return FixedWindowRateLimiter(max_requests=5, window_seconds=60.0, clock=clock)


@pytest.fixture
def analyzer() -> ArgumentAnalyzer:
    return build_fake_analyzer()


@pytest.fixture
async def client(limiter: FixedWindowRateLimiter, analyzer: ArgumentAnalyzer) -> AsyncGenerator[AsyncClient, None]:
    app.dependency_overrides[get_rate_limiter] = lambda: limiter
    app.dependency_overrides[get_analyzer] = lambda: analyzer
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()
