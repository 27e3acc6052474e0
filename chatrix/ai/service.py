"""
AI chat service - Composes sanitizer, persona prompt and gateway

One call per /ai/chat request. Applies the outer timeout that bounds the
provider call.
"""

import asyncio
from typing import Any, Optional

from loguru import logger

from chatrix.ai.gateway import CompletionGateway
from chatrix.ai.history import sanitize_history
from chatrix.ai.persona import build_system_prompt
from chatrix.config.settings import settings, Settings
from chatrix.utils.errors import GatewayFailure


class AIChatService:
    """Produces persona-consistent replies for the synthetic participant."""

    def __init__(self, gateway: Optional[CompletionGateway] = None, config: Optional[Settings] = None):
        self.config = config or settings
        self.gateway = gateway or CompletionGateway(config=self.config)

    async def reply(self, message: str, history: Any, user_name: Optional[str] = None) -> str:
        """
        Generate the AI reply for one user message.

        Args:
            message: Validated user text
            history: Raw client-supplied history (sanitized here)
            user_name: Display name used for personalization

        Returns:
            Reply text
        """
        cleaned = sanitize_history(history, limit=self.config.ai_history_limit)
        system_prompt = build_system_prompt(user_name, assistant_name=self.config.assistant_name)
        logger.info(f"AI chat request with {len(cleaned)} history entries")

        try:
            return await asyncio.wait_for(
                self.gateway.complete(system_prompt, cleaned, message),
                timeout=self.config.ai_request_timeout,
            )
        except asyncio.TimeoutError as e:
            logger.error(f"AI error: provider call exceeded {self.config.ai_request_timeout}s")
            raise GatewayFailure() from e
