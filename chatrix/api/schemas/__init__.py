"""
API schemas for request/response models
"""

from chatrix.api.schemas.ai import (
    AIChatRequest,
    AIChatResponse,
    ErrorResponse,
    HealthResponse,
)
from chatrix.api.schemas.identity import AuthenticatedUser, USER_ID_HEADER, USER_NAME_HEADER

__all__ = [
    "AIChatRequest",
    "AIChatResponse",
    "AuthenticatedUser",
    "ErrorResponse",
    "HealthResponse",
    "USER_ID_HEADER",
    "USER_NAME_HEADER",
]
