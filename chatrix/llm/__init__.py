"""
LLM layer - Chat model factory for the completion provider
"""

from chatrix.llm.client import create_llm, ensure_credentials

__all__ = [
    "create_llm",
    "ensure_credentials",
]
