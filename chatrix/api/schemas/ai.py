"""
AI chat models for the /ai/chat API contract
"""

from typing import Any

from pydantic import BaseModel, Field

from chatrix.utils.errors import ValidationError


class AIChatRequest(BaseModel):
    """
    Request body for POST /ai/chat

    `history` is accepted as-is and sanitized server-side, so malformed
    entries never fail the request. Only `message` is validated.
    """
    message: str = Field(..., description="The user's new message")
    history: Any = Field(default_factory=list, description="Prior turns, oldest first")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "message": "kya haal hai?",
                    "history": [
                        {"role": "user", "content": "hi"},
                        {"role": "assistant", "content": "Hey! What's up?"}
                    ]
                }
            ]
        }
    }

    @classmethod
    def from_payload(cls, payload: Any) -> "AIChatRequest":
        """Build a request from a decoded JSON body, raising ValidationError on a bad message."""
        body = payload if isinstance(payload, dict) else {}
        message = body.get("message")
        if not message or not isinstance(message, str):
            raise ValidationError()
        history = body.get("history")
        return cls(message=message, history=[] if history is None else history)


class AIChatResponse(BaseModel):
    """AI reply text"""
    text: str


class ErrorResponse(BaseModel):
    """Error body shared by every non-2xx response"""
    message: str


class HealthResponse(BaseModel):
    """
    Health check response

    Attributes:
        status: Service health status
        service: Service name
        version: API version
    """
    status: str = Field(..., description="Health status")
    service: str = Field(..., description="Service name")
    version: str = Field(..., description="API version")
