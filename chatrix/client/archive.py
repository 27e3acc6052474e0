"""
Local AI archive - durable per-user copy of the AI conversation

The AI timeline is never stored server-side. Each signed-in user gets one
entry "<namespace>:<user id>" holding a JSON array of messages, capped to
the most recent `limit` messages on every write.
"""

import json
from typing import List, Optional, Sequence

from loguru import logger
from pydantic import ValidationError

from chatrix.client.models import Message
from chatrix.client.storage import JsonFileStorage, KeyValueStorage
from chatrix.config.settings import resolve_path, settings, Settings

ANONYMOUS_USER = "anon"


class LocalAIArchive:
    """Per-user AI message archive on top of a key/value storage."""

    def __init__(
        self,
        storage: KeyValueStorage,
        namespace: Optional[str] = None,
        limit: Optional[int] = None,
    ):
        self.storage = storage
        self.namespace = namespace or settings.archive_namespace
        self.limit = settings.archive_limit if limit is None else limit

    def key_for(self, user_id: Optional[str]) -> str:
        return f"{self.namespace}:{user_id or ANONYMOUS_USER}"

    def load(self, user_id: Optional[str]) -> List[Message]:
        """
        Read the user's AI timeline.

        Returns:
            Stored messages oldest first; empty when absent or unreadable
        """
        key = self.key_for(user_id)
        try:
            raw = self.storage.get_item(key)
            if not raw:
                return []
            data = json.loads(raw)
            if not isinstance(data, list):
                logger.warning(f"AI archive {key} is not a list, treating as empty")
                return []
            return [Message.model_validate(item) for item in data]
        except (OSError, ValueError, TypeError, ValidationError) as e:
            logger.warning(f"AI archive {key} unreadable, treating as empty: {e}")
            return []

    def save(self, user_id: Optional[str], messages: Sequence[Message]) -> None:
        """Write the most recent `limit` messages. Failures are logged, never raised."""
        key = self.key_for(user_id)
        recent = list(messages)[-self.limit:] if self.limit > 0 else []
        try:
            self.storage.set_item(key, json.dumps([m.to_wire() for m in recent], ensure_ascii=False))
        except (OSError, TypeError, ValueError) as e:
            logger.warning(f"Could not persist AI archive {key}: {e}")


def default_archive(config: Optional[Settings] = None) -> LocalAIArchive:
    """Archive backed by JSON files under the configured client storage directory."""
    config = config or settings
    return LocalAIArchive(
        JsonFileStorage(resolve_path(config.client_storage_dir)),
        namespace=config.archive_namespace,
        limit=config.archive_limit,
    )
