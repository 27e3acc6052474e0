"""
POST /api/ai/chat endpoint tests

Uses FastAPI's TestClient with a scripted chat model, so no provider is contacted.
Every test runs on the `clock` fixture so rate-limit windows are deterministic.
"""

import sys
from pathlib import Path

import httpx
import openai
import pytest
from fastapi.testclient import TestClient

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from conftest import ScriptedChatModel
from chatrix.ai.gateway import CompletionGateway
from chatrix.ai.service import AIChatService
from chatrix.api.app import create_app
from chatrix.config.constants import (
    BURST_LIMIT_MESSAGE,
    INVALID_MESSAGE_MESSAGE,
    MINUTE_LIMIT_MESSAGE,
    PROVIDER_LIMIT_MESSAGE,
)
from chatrix.config.settings import Settings
from chatrix.ratelimit.limiter import TieredRateLimiter

AUTH = {"X-User-Id": "u-asha", "X-User-Name": "Asha"}

pytestmark = pytest.mark.usefixtures("clock")


def _client(llm=None, config=None):
    config = config or Settings(groq_api_key="gsk_test_key_123456")
    gateway = CompletionGateway(llm=llm, config=config) if llm is not None else CompletionGateway(config=config)
    limiter = TieredRateLimiter.from_settings(config)
    app = create_app(ai_service=AIChatService(gateway=gateway, config=config), rate_limiter=limiter, config=config)
    return TestClient(app)


def _relaxed():
    return Settings(groq_api_key="gsk_test_key_123456", ai_burst_limit=100, ai_minute_limit=100, ai_daily_limit=100)


def test_returns_reply_text():
    llm = ScriptedChatModel(reply="  Hey Asha! Sab badhiya?  ")
    client = _client(llm=llm)

    response = client.post("/api/ai/chat", json={"message": "kya haal hai", "history": []}, headers=AUTH)

    assert response.status_code == 200
    assert response.json() == {"text": "Hey Asha! Sab badhiya?"}
    assert "Asha" in llm.calls[0][0].content, "Display name reaches the persona prompt"
    assert response.headers["RateLimit-Limit"] == "1"
    assert response.headers["RateLimit-Remaining"] == "0"
    assert response.headers["RateLimit-Reset"] == "3"


def test_requires_identity():
    client = _client(llm=ScriptedChatModel())

    response = client.post("/api/ai/chat", json={"message": "hi"})

    assert response.status_code == 401


@pytest.mark.parametrize("body", [{}, {"message": ""}, {"message": 42}, {"message": None, "history": []}, ["hi"]])
def test_invalid_message_is_400(body):
    llm = ScriptedChatModel()
    client = _client(llm=llm, config=_relaxed())

    response = client.post("/api/ai/chat", json=body, headers=AUTH)

    assert response.status_code == 400
    assert response.json() == {"message": INVALID_MESSAGE_MESSAGE}
    assert llm.calls == []


def test_unparseable_body_is_400():
    client = _client(llm=ScriptedChatModel(), config=_relaxed())

    response = client.post("/api/ai/chat", content=b"{not json", headers={**AUTH, "Content-Type": "application/json"})

    assert response.status_code == 400


def test_malformed_history_does_not_fail_request():
    llm = ScriptedChatModel(reply="ok")
    client = _client(llm=llm, config=_relaxed())

    response = client.post("/api/ai/chat", json={"message": "hi", "history": "not-a-list"}, headers=AUTH)

    assert response.status_code == 200
    assert len(llm.calls[0]) == 2, "Only system prompt and the new message are sent"


def test_burst_then_minute_tier_denials(clock):
    client = _client(llm=ScriptedChatModel())

    assert client.post("/api/ai/chat", json={"message": "1"}, headers=AUTH).status_code == 200

    clock.advance(1)
    denied = client.post("/api/ai/chat", json={"message": "2"}, headers=AUTH)
    assert denied.status_code == 429
    assert denied.json() == {"message": BURST_LIMIT_MESSAGE}
    assert denied.headers["Retry-After"] == "2"
    assert denied.headers["RateLimit-Reset"] == "2"

    for i in range(9):
        clock.advance(3)
        assert client.post("/api/ai/chat", json={"message": f"m{i}"}, headers=AUTH).status_code == 200

    clock.advance(3)
    denied = client.post("/api/ai/chat", json={"message": "11"}, headers=AUTH)
    assert denied.status_code == 429
    assert denied.json() == {"message": MINUTE_LIMIT_MESSAGE}


def test_missing_credentials_is_500():
    client = _client(config=Settings(groq_api_key="", llm_provider="groq"))

    response = client.post("/api/ai/chat", json={"message": "hi"}, headers=AUTH)

    assert response.status_code == 500
    assert "GROQ_API_KEY" in response.json()["message"]


def test_provider_rate_limit_is_429():
    request = httpx.Request("POST", "https://api.groq.com/openai/v1/chat/completions")
    error = openai.RateLimitError("slow down", response=httpx.Response(429, request=request), body=None)
    client = _client(llm=ScriptedChatModel(error=error))

    response = client.post("/api/ai/chat", json={"message": "hi"}, headers=AUTH)

    assert response.status_code == 429
    assert response.json() == {"message": PROVIDER_LIMIT_MESSAGE}


def test_provider_failure_is_500():
    client = _client(llm=ScriptedChatModel(error=RuntimeError("upstream exploded")))

    response = client.post("/api/ai/chat", json={"message": "hi"}, headers=AUTH)

    assert response.status_code == 500
    assert response.json() == {"message": "AI error"}
    assert response.headers["RateLimit-Limit"] == "1", "Limiter metadata survives the error response"


def test_health():
    client = _client(llm=ScriptedChatModel())

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
