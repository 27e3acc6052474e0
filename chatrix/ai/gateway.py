"""
Completion Gateway - Sends the assembled conversation to the provider

Translates the internal request shape (system prompt, sanitized history,
new user text) into a chat-model call and maps the provider's outcome to
the subsystem's error types. No retries happen here.
"""

from typing import Dict, List, Optional, Sequence

import openai
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from loguru import logger

from chatrix.ai.history import ROLE_ASSISTANT
from chatrix.config.constants import FALLBACK_REPLY, PROVIDER_LIMIT_MESSAGE, TIER_PROVIDER
from chatrix.config.settings import settings, Settings
from chatrix.llm.client import create_llm, ensure_credentials
from chatrix.utils.errors import ChatrixError, GatewayFailure, RateLimited


def build_messages(
    system_prompt: str,
    history: Sequence[Dict[str, str]],
    user_text: str,
) -> List[BaseMessage]:
    """Assemble [system, *history, user] as LangChain messages."""
    messages: List[BaseMessage] = [SystemMessage(content=system_prompt)]
    for entry in history:
        if entry["role"] == ROLE_ASSISTANT:
            messages.append(AIMessage(content=entry["content"]))
        else:
            messages.append(HumanMessage(content=entry["content"]))
    messages.append(HumanMessage(content=user_text))
    return messages


def _reply_text(response: BaseMessage) -> str:
    """Text of the returned message; content blocks other than text (reasoning) are skipped."""
    content = response.content
    if isinstance(content, str):
        return content.strip()
    parts = []
    for block in content or []:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(block.get("text", ""))
    return "".join(parts).strip()


def _is_provider_rate_limit(exc: Exception) -> bool:
    if isinstance(exc, openai.RateLimitError):
        return True
    return getattr(exc, "status_code", None) == 429 or getattr(exc, "status", None) == 429


class CompletionGateway:
    """
    Single entry point for AI replies.

    The chat model is created lazily on first use so that a missing API key
    surfaces as Misconfigured before any network call.
    """

    def __init__(self, llm: Optional[BaseChatModel] = None, config: Optional[Settings] = None):
        """
        Initialize the gateway.

        Args:
            llm: Chat model to use (defaults to create_llm on first call)
            config: Settings override
        """
        self.config = config or settings
        self._llm = llm

    def ensure_configured(self) -> None:
        """Raise Misconfigured when no model was injected and credentials are absent."""
        if self._llm is None:
            ensure_credentials(self.config)

    @property
    def llm(self) -> BaseChatModel:
        if self._llm is None:
            self._llm = create_llm(config=self.config)
        return self._llm

    async def complete(
        self,
        system_prompt: str,
        history: Sequence[Dict[str, str]],
        user_text: str,
    ) -> str:
        """
        Get a reply for the user's message.

        Args:
            system_prompt: Persona instructions
            history: Sanitized history entries
            user_text: The message being answered

        Returns:
            Trimmed reply text, never empty

        Raises:
            Misconfigured: Provider credentials are absent
            RateLimited: Provider reported a rate limit
            GatewayFailure: Any other provider or network failure
        """
        self.ensure_configured()
        messages = build_messages(system_prompt, history, user_text)
        logger.debug(f"Sending {len(messages)} messages to completion provider")

        try:
            response = await self.llm.ainvoke(messages)
        except ChatrixError:
            raise
        except Exception as e:
            if _is_provider_rate_limit(e):
                logger.warning(f"Completion provider rate limit: {e}")
                raise RateLimited(PROVIDER_LIMIT_MESSAGE, tier=TIER_PROVIDER) from e
            logger.error(f"AI error: {e}")
            raise GatewayFailure() from e

        text = _reply_text(response)
        if not text:
            logger.warning("Completion provider returned no usable text, using fallback reply")
            return FALLBACK_REPLY
        return text
