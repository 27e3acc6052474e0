"""
AI conversation layer - History sanitizing, persona prompt, completion gateway
"""

from chatrix.ai.gateway import CompletionGateway, build_messages
from chatrix.ai.history import sanitize_history
from chatrix.ai.persona import build_system_prompt
from chatrix.ai.service import AIChatService

__all__ = [
    "AIChatService",
    "CompletionGateway",
    "build_messages",
    "build_system_prompt",
    "sanitize_history",
]
