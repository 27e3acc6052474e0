"""
Shared fixtures: a scripted chat model and a fake chat API behind httpx.MockTransport.
"""

import asyncio
import json
import sys
import time
from pathlib import Path

import httpx
import pytest
from langchain_core.messages import AIMessage

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from chatrix.client.archive import LocalAIArchive
from chatrix.client.chime import LoggingAudioBackend, MessageChime
from chatrix.client.http import ChatApiClient
from chatrix.client.storage import MemoryStorage
from chatrix.client.store import ConversationStore


class ScriptedChatModel:
    """Stands in for a LangChain chat model: returns `reply` or raises `error`."""

    def __init__(self, reply="Hey there!", error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    async def ainvoke(self, messages):
        self.calls.append(list(messages))
        if self.error is not None:
            raise self.error
        return AIMessage(content=self.reply)


class FakeChatServer:
    """
    Minimal chat API for client tests.

    Routes:
        GET  /api/messages/users
        GET  /api/messages/{peer_id}
        POST /api/messages/send/{peer_id}
        POST /api/ai/chat
    """

    def __init__(self):
        self.requests = []
        self.users = [{"_id": "u-bob", "fullName": "Bob"}]
        self.threads = {}
        self.ai_status = 200
        self.ai_body = {"text": "Hi! How can I help?"}
        self.ai_headers = {}
        self.send_status = 201
        self.users_status = 200
        self.on_ai_request = None
        self.latency = 0.0
        self._next_id = 1

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        body = json.loads(request.content) if request.content else None

        if path == "/api/ai/chat":
            if self.on_ai_request is not None:
                self.on_ai_request(body)
            return httpx.Response(self.ai_status, json=self.ai_body, headers=self.ai_headers)

        if path == "/api/messages/users":
            return httpx.Response(self.users_status, json=self.users if self.users_status == 200 else {"message": "boom"})

        if path.startswith("/api/messages/send/"):
            peer_id = path.rsplit("/", 1)[-1]
            if self.send_status >= 400:
                return httpx.Response(self.send_status, json={"message": "Receiver not found"})
            message = {
                "_id": f"srv-{self._next_id}",
                "senderId": "u-me",
                "receiverId": peer_id,
                "text": body.get("text", ""),
                "createdAt": "2026-10-19T10:00:00Z",
            }
            if body.get("image"):
                message["image"] = body["image"]
            self._next_id += 1
            self.threads.setdefault(peer_id, []).append(message)
            return httpx.Response(self.send_status, json=message)

        if path.startswith("/api/messages/"):
            peer_id = path.rsplit("/", 1)[-1]
            return httpx.Response(200, json=self.threads.get(peer_id, []))

        return httpx.Response(404, json={"message": "Not found"})

    async def handle_async(self, request: httpx.Request) -> httpx.Response:
        """Async entry point: suspends like a real network call before answering."""
        await asyncio.sleep(self.latency)
        return self.handler(request)

    def ai_requests(self):
        return [r for r in self.requests if r.url.path == "/api/ai/chat"]


@pytest.fixture
def chat_server():
    return FakeChatServer()


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def archive(storage):
    return LocalAIArchive(storage, namespace="ai-assistant-messages", limit=100)


@pytest.fixture
def chime():
    return MessageChime(backend=LoggingAudioBackend())


@pytest.fixture
def notices():
    return []


@pytest.fixture
def make_store(chat_server, archive, chime, notices):
    """Factory so each test builds its store inside its own event loop."""

    def _make(user_id="u-me"):
        api = ChatApiClient(
            base_url="http://chat.test/api",
            headers={"X-User-Id": user_id},
            transport=httpx.MockTransport(chat_server.handle_async),
        )
        return ConversationStore(api, archive, user_id=user_id, chime=chime, on_notice=notices.append)

    return _make


class FakeClock:
    """Wall clock the tests move by hand; installed as time.time."""

    def __init__(self, now=1_700_000_000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock(monkeypatch):
    fake = FakeClock()
    monkeypatch.setattr(time, "time", fake)
    return fake
