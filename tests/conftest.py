import os

os.environ.setdefault("GEMINI_API_KEY", "test-gemini-key")

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from google.genai import types

from moderation_api.core.config import Settings
from moderation_api.main import create_app
from moderation_api.schemas.moderation import RateLimitResult
from moderation_api.services.base.moderation_model import BaseModerationModel
from moderation_api.services.base.rate_limiter import BaseRateLimiter

RESET_MS = 1_700_000_040_000

CONFIG_VARS = [
    "GEMINI_MODEL",
    "REDIS_URL",
    "KV_URL",
    "RATE_LIMIT_MAX_REQUESTS",
    "RATE_LIMIT_WINDOW_SECONDS",
    "RATE_LIMIT_FAIL_OPEN",
    "EXPOSE_ERROR_DETAILS",
    "MAX_CONTENT_LENGTH",
    "LOG_LEVEL",
]


def gemini_response(text):
    """Build a provider response carrying a single text part."""
    return types.GenerateContentResponse(
        candidates=[
            types.Candidate(content=types.Content(role="model", parts=[types.Part(text=text)]))
        ]
    )


class StubRateLimiter(BaseRateLimiter):
    def __init__(self, success=True, reset=RESET_MS, error=None):
        self.success = success
        self.reset = reset
        self.error = error
        self.calls = []

    async def limit(self, key):
        self.calls.append(key)
        if self.error:
            raise self.error
        return RateLimitResult(success=self.success, reset=self.reset)


class StubModerationModel(BaseModerationModel):
    def __init__(self, text='{"safe": true, "reason": "ok"}', response=None, error=None):
        self.text = text
        self.response = response
        self.error = error
        self.calls = []

    async def generate_content(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        if self.response is not None:
            return self.response
        return gemini_response(self.text)


@pytest.fixture
def settings(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "test-gemini-key")
    for var in CONFIG_VARS:
        monkeypatch.delenv(var, raising=False)
    return Settings()


@pytest.fixture
def rate_limiter():
    return StubRateLimiter()


@pytest.fixture
def moderation_model():
    return StubModerationModel()


@pytest.fixture
def app(settings, rate_limiter, moderation_model):
    return create_app(settings=settings, rate_limiter=rate_limiter, moderation_model=moderation_model)


@pytest_asyncio.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
