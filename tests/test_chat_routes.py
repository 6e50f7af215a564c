from typing import List

import anthropic
import httpx
import openai
import pytest
from fastapi.testclient import TestClient

from conftest import build_settings
from duoreport.ai.base_provider import AIProvider, ChatTurn
from duoreport.api.deps import get_providers, get_settings
from duoreport.main import app

ROWS = [
    {"date": "2024-03-30", "fb_cpa": 4.2, "tt_cpa": 6.1},
    {"date": "2024-03-29", "fb_cpa": 3.9, "tt_cpa": 5.0},
]


class FakeProvider(AIProvider):
    def __init__(self, name: str, available: bool = True, reply_text: str = "", error: Exception = None):
        self.name = name
        self.available = available
        self.reply_text = reply_text or f"{name} says hi"
        self.error = error
        self.calls = []

    def is_available(self) -> bool:
        return self.available

    async def reply(self, question: str, marketing_data: List[dict], history: List[ChatTurn]) -> str:
        self.calls.append((question, marketing_data, history))
        if self.error is not None:
            raise self.error
        return self.reply_text


@pytest.fixture
def client():
    yield TestClient(app)
    app.dependency_overrides.clear()


def _use(providers, **settings_overrides):
    settings = build_settings(**settings_overrides)
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_providers] = lambda: {p.name: p for p in providers}


def test_reply_is_passed_through_verbatim(client):
    claude = FakeProvider("claude", reply_text="**TikTok CPA is 45% higher.**\n- Shift budget")
    _use([claude])

    resp = client.post(
        "/api/ask",
        json={"user_query": "Which platform is cheaper?", "marketing_data": ROWS, "history": []},
    )

    assert resp.status_code == 200
    assert resp.json() == {
        "status": "success",
        "provider_used": "claude",
        "reply": "**TikTok CPA is 45% higher.**\n- Shift budget",
    }
    question, data, history = claude.calls[0]
    assert question == "Which platform is cheaper?"
    assert data == ROWS
    assert history == []


def test_history_is_filtered_and_bounded(client):
    claude = FakeProvider("claude")
    _use([claude], chat_history_limit=2)
    history = [
        {"sender": "ai", "text": "Hello! Ask me about your ads."},
        {"sender": "user", "text": "How was last week?"},
        {"sender": "ai", "text": "", "isLoading": True},
        {"sender": "ai", "text": "Spend rose 10%."},
        {"sender": "robot", "text": "ignored"},
        "garbage",
    ]

    resp = client.post(
        "/api/ask",
        json={"userQuery": "And CPA?", "marketingData": ROWS, "history": history},
    )

    assert resp.status_code == 200
    _, _, turns = claude.calls[0]
    assert turns == [
        ChatTurn(role="user", content="How was last week?"),
        ChatTurn(role="assistant", content="Spend rose 10%."),
    ]


@pytest.mark.parametrize(
    "payload",
    [
        {"marketing_data": ROWS},
        {"user_query": "   ", "marketing_data": ROWS},
        {"user_query": "Hi", "marketing_data": {"date": "2024-03-30"}},
        {"user_query": "Hi"},
    ],
)
def test_invalid_request_is_bad_request(client, payload):
    claude = FakeProvider("claude")
    _use([claude])

    resp = client.post("/api/ask", json=payload)

    assert resp.status_code == 400
    assert claude.calls == []


def test_auto_falls_through_to_available_provider(client):
    _use([FakeProvider("claude", available=False), FakeProvider("openai"), FakeProvider("sarvam")])

    resp = client.post("/api/ask", json={"user_query": "Hi", "marketing_data": []})

    assert resp.json()["provider_used"] == "openai"


def test_auto_prefers_configured_default(client):
    _use([FakeProvider("claude"), FakeProvider("sarvam")], default_ai_provider="sarvam")

    resp = client.post("/api/ask", json={"user_query": "Hi", "marketing_data": []})

    assert resp.json()["provider_used"] == "sarvam"


def test_no_provider_configured_is_service_unavailable(client):
    _use([FakeProvider("claude", available=False)])
    resp = client.post("/api/ask", json={"user_query": "Hi", "marketing_data": []})
    assert resp.status_code == 503


def test_unknown_provider_is_bad_request(client):
    _use([FakeProvider("claude")])
    resp = client.post("/api/ask", json={"user_query": "Hi", "marketing_data": [], "provider": "gemini"})
    assert resp.status_code == 400


@pytest.mark.parametrize(
    "error, status",
    [
        (RuntimeError("API key not valid. Please pass a valid API key."), 401),
        (RuntimeError("You exceeded your current quota"), 429),
        (RuntimeError("Rate limit reached for requests"), 429),
        (RuntimeError("upstream exploded"), 500),
    ],
)
def test_provider_failures_are_mapped(client, error, status):
    _use([FakeProvider("claude", error=error)])
    resp = client.post("/api/ask", json={"user_query": "Hi", "marketing_data": ROWS})
    assert resp.status_code == status


def _sdk_response(status: int, url: str) -> httpx.Response:
    return httpx.Response(status, request=httpx.Request("POST", url))


def test_anthropic_authentication_error_is_unauthorized(client):
    body = {"type": "error", "error": {"type": "authentication_error", "message": "invalid x-api-key"}}
    error = anthropic.AuthenticationError(
        f"Error code: 401 - {body}",
        response=_sdk_response(401, "https://api.anthropic.com/v1/messages"),
        body=body,
    )
    _use([FakeProvider("claude", error=error)])

    resp = client.post("/api/ask", json={"user_query": "Hi", "marketing_data": ROWS})

    assert resp.status_code == 401
    assert "authentication_error" not in resp.json()["detail"]


def test_openai_rate_limit_error_is_too_many_requests(client):
    body = {"error": {"message": "Rate limit reached", "type": "requests", "code": "rate_limit_exceeded"}}
    error = openai.RateLimitError(
        f"Error code: 429 - {body}",
        response=_sdk_response(429, "https://api.openai.com/v1/chat/completions"),
        body=body,
    )
    _use([FakeProvider("openai", error=error)])

    resp = client.post(
        "/api/ask", json={"user_query": "Hi", "marketing_data": ROWS, "provider": "openai"}
    )

    assert resp.status_code == 429
    assert "rate_limit_exceeded" not in resp.json()["detail"]
