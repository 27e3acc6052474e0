"""
Custom error classes for the application

Every server-side error carries the HTTP status it maps to and a
user-facing message. The API layer turns them into JSON responses.
"""

from typing import Dict, Optional

from chatrix.config.constants import (
    GATEWAY_FAILURE_MESSAGE,
    INVALID_MESSAGE_MESSAGE,
    MISSING_CREDENTIALS_MESSAGE,
    UNAUTHENTICATED_MESSAGE,
)


class ChatrixError(Exception):
    """Base exception for chat subsystem errors"""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def headers(self) -> Dict[str, str]:
        return {}


class ValidationError(ChatrixError):
    """Missing or malformed request body"""

    status_code = 400
    default_message = INVALID_MESSAGE_MESSAGE


class AuthenticationError(ChatrixError):
    """Caller has no authenticated identity"""

    status_code = 401
    default_message = UNAUTHENTICATED_MESSAGE


class RateLimited(ChatrixError):
    """
    A rate-limit tier (or the completion provider) denied the request.

    Attributes:
        tier: Name of the denying tier ("burst", "minute", "daily", "provider")
        limit: Requests allowed in the tier window (None for provider denials)
        reset_after: Seconds until the tier window resets, when known
    """

    status_code = 429

    def __init__(
        self,
        message: str,
        tier: str,
        limit: Optional[int] = None,
        reset_after: Optional[float] = None,
        window: Optional[float] = None,
    ):
        super().__init__(message)
        self.tier = tier
        self.limit = limit
        self.reset_after = reset_after
        self.window = window

    def headers(self) -> Dict[str, str]:
        if self.reset_after is None:
            return {}
        seconds = max(0, int(-(-self.reset_after // 1)))  # ceil
        headers = {
            "Retry-After": str(seconds),
            "RateLimit-Reset": str(seconds),
            "RateLimit-Remaining": "0",
        }
        if self.limit is not None:
            headers["RateLimit-Limit"] = str(self.limit)
        if self.limit is not None and self.window is not None:
            headers["RateLimit-Policy"] = f"{self.limit};w={int(self.window)}"
        return headers


class Misconfigured(ChatrixError):
    """Required provider credentials are absent"""

    status_code = 500
    default_message = MISSING_CREDENTIALS_MESSAGE


class GatewayFailure(ChatrixError):
    """Provider or network failure other than a rate limit"""

    status_code = 500
    default_message = GATEWAY_FAILURE_MESSAGE
