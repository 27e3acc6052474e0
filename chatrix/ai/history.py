"""
Conversation history sanitization

Client-supplied history is untrusted. It is normalized into a bounded list of
{"role", "content"} entries before it reaches the completion provider; the
outer request is never rejected because of it.
"""

from typing import Any, Dict, List

from chatrix.config.settings import settings

ROLE_USER = "user"
ROLE_ASSISTANT = "assistant"


def sanitize_history(history: Any, limit: int = None) -> List[Dict[str, str]]:
    """
    Normalize an untrusted history payload.

    Args:
        history: Anything the client sent as "history"
        limit: Max entries kept, most recent last (defaults to settings.ai_history_limit)

    Returns:
        List of at most `limit` entries, each with role in {"user", "assistant"}
        and string content
    """
    if not isinstance(history, list):
        return []

    limit = settings.ai_history_limit if limit is None else limit
    if limit <= 0:
        return []

    cleaned = []
    for entry in history[-limit:]:
        role = entry.get("role") if isinstance(entry, dict) else None
        content = entry.get("content") if isinstance(entry, dict) else None
        cleaned.append({
            "role": ROLE_ASSISTANT if role == ROLE_ASSISTANT else ROLE_USER,
            "content": content if isinstance(content, str) else "",
        })
    return cleaned
