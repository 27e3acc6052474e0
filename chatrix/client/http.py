"""
Async HTTP client for the chat API

Wraps httpx and turns every failure (HTTP error status, transport error,
undecodable body) into ApiError so callers handle one exception type.
"""

import math
import time
from typing import Any, Dict, List, Mapping, Optional

import httpx
from loguru import logger
from pydantic import ValidationError

from chatrix.client.models import Message
from chatrix.config.settings import settings

RESET_HEADERS = ("ratelimit-reset", "x-ratelimit-reset", "retry-after")


class ApiError(Exception):
    """
    Failed API call.

    Attributes:
        status: HTTP status, or None when the request never got a response
        message: Server-provided message, if any
        headers: Response headers with lowercased names
    """

    def __init__(self, status: Optional[int], message: Optional[str] = None, headers: Optional[Mapping[str, str]] = None):
        self.status = status
        self.message = message
        self.headers = {k.lower(): v for k, v in (headers or {}).items()}
        super().__init__(f"{status}: {message}")

    @property
    def is_rate_limited(self) -> bool:
        return self.status == 429

    @classmethod
    def from_response(cls, response: httpx.Response) -> "ApiError":
        message = None
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            message = body.get("message") or body.get("error")
        return cls(response.status_code, message, dict(response.headers))


def retry_after_seconds(headers: Mapping[str, str], now: Optional[float] = None) -> int:
    """
    Seconds until the rate limit resets, from RateLimit-Reset / X-RateLimit-Reset / Retry-After.

    The value may be a delay in seconds or an absolute epoch timestamp; values
    larger than the current epoch are treated as timestamps. Returns 0 when
    unknown.
    """
    raw = next((headers.get(name) for name in RESET_HEADERS if headers.get(name)), None)
    if raw is None:
        return 0
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(value):
        return 0
    now_sec = math.floor(time.time() if now is None else now)
    seconds = value - now_sec if value > now_sec else value
    return max(0, int(seconds))


def _parse_message(data: Any) -> Message:
    try:
        return Message.model_validate(data)
    except ValidationError as e:
        raise ApiError(None, "Invalid message payload") from e


class ChatApiClient:
    """Client for the AI endpoint and the human chat endpoints."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.client_api_base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "ChatApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, url: str, **kwargs) -> Any:
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"{method} {url} failed: {e}")
            raise ApiError(None, None) from e

        if response.is_error:
            raise ApiError.from_response(response)

        try:
            return response.json()
        except ValueError as e:
            raise ApiError(response.status_code, "Invalid JSON response") from e

    async def get_users(self) -> List[Dict[str, Any]]:
        data = await self._request("GET", "/messages/users")
        return data if isinstance(data, list) else []

    async def get_messages(self, peer_id: str) -> List[Message]:
        data = await self._request("GET", f"/messages/{peer_id}")
        if not isinstance(data, list):
            return []
        return [_parse_message(item) for item in data]

    async def send_message(self, peer_id: str, payload: Dict[str, Any]) -> Message:
        data = await self._request("POST", f"/messages/send/{peer_id}", json=payload)
        return _parse_message(data)

    async def ai_chat(self, message: str, history: List[Dict[str, str]]) -> Dict[str, Any]:
        data = await self._request("POST", "/ai/chat", json={"message": message, "history": history})
        return data if isinstance(data, dict) else {}
