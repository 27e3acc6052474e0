"""
AI chat endpoint

POST /ai/chat turns one user message plus recent history into a reply from
the synthetic participant. Nothing is persisted server-side.
"""

from fastapi import APIRouter, Depends, Request
from loguru import logger

from chatrix.ai.service import AIChatService
from chatrix.api.deps import enforce_ai_rate_limits, get_ai_service
from chatrix.api.schemas.ai import AIChatRequest, AIChatResponse, ErrorResponse
from chatrix.api.schemas.identity import AuthenticatedUser


router = APIRouter(prefix="/ai", tags=["ai"])


@router.post(
    "/chat",
    response_model=AIChatResponse,
    responses={
        400: {"model": ErrorResponse, "description": "message missing or not a string"},
        401: {"model": ErrorResponse, "description": "No authenticated caller"},
        429: {"model": ErrorResponse, "description": "A rate-limit tier denied the request"},
        500: {"model": ErrorResponse, "description": "Provider misconfigured or failed"},
    },
)
async def chat_with_ai(
    request: Request,
    user: AuthenticatedUser = Depends(enforce_ai_rate_limits),
    service: AIChatService = Depends(get_ai_service),
) -> AIChatResponse:
    """
    Reply to a user message as the AI participant.

    Order of checks: identity, rate-limit tiers, provider credentials,
    request body. History is sanitized rather than validated.
    """
    service.gateway.ensure_configured()

    try:
        payload = await request.json()
    except ValueError:
        payload = None
    body = AIChatRequest.from_payload(payload)

    logger.info(f"AI chat - user={user.id}")
    logger.debug(f"Message: {body.message[:100]}")

    text = await service.reply(body.message, body.history, user_name=user.display_name)
    return AIChatResponse(text=text)
