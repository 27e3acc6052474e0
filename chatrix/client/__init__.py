"""
Client layer - conversation store, local AI archive, realtime bridge
"""

from chatrix.client.archive import LocalAIArchive, default_archive
from chatrix.client.chime import MessageChime, get_chime
from chatrix.client.http import ApiError, ChatApiClient, retry_after_seconds
from chatrix.client.models import (
    AI_PEER,
    AIPeer,
    HumanPeer,
    Message,
    MessageDraft,
    Notice,
    Peer,
    SendOutcome,
    SendPhase,
)
from chatrix.client.realtime import LocalEventBus, RealtimeBridge, SocketIOEventSource
from chatrix.client.storage import JsonFileStorage, MemoryStorage
from chatrix.client.store import ConversationStore, project_history

__all__ = [
    "AI_PEER",
    "AIPeer",
    "ApiError",
    "ChatApiClient",
    "ConversationStore",
    "HumanPeer",
    "JsonFileStorage",
    "LocalAIArchive",
    "LocalEventBus",
    "MemoryStorage",
    "Message",
    "MessageChime",
    "MessageDraft",
    "Notice",
    "Peer",
    "RealtimeBridge",
    "SendOutcome",
    "SendPhase",
    "SocketIOEventSource",
    "default_archive",
    "get_chime",
    "project_history",
    "retry_after_seconds",
]
