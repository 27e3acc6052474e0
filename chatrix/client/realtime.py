"""
Realtime bridge - pushes inbound human messages into the open timeline

Only peers that support realtime delivery are subscribed; the AI peer is
request/response and never gets a listener. Every (re)subscription removes
the previous listener first so a message is never delivered twice.
"""

from collections import defaultdict
from typing import Any, Callable, Dict, List, Optional, Protocol

import socketio
from loguru import logger
from pydantic import ValidationError

from chatrix.client.chime import MessageChime, get_chime
from chatrix.client.models import Message
from chatrix.client.store import ConversationStore
from chatrix.config.constants import NEW_MESSAGE_EVENT

Handler = Callable[[Any], None]


class EventSource(Protocol):
    def on(self, event: str, handler: Handler) -> None: ...

    def off(self, event: str) -> None: ...


class LocalEventBus:
    """In-process event source; `emit` dispatches synchronously."""

    def __init__(self):
        self._handlers: Dict[str, List[Handler]] = defaultdict(list)

    def on(self, event: str, handler: Handler) -> None:
        self._handlers[event].append(handler)

    def off(self, event: str) -> None:
        self._handlers.pop(event, None)

    def emit(self, event: str, payload: Any) -> None:
        for handler in list(self._handlers.get(event, [])):
            handler(payload)

    def listener_count(self, event: str) -> int:
        return len(self._handlers.get(event, []))


class SocketIOEventSource(LocalEventBus):
    """
    Event source backed by a python-socketio AsyncClient.

    The socket gets one dispatcher per event; `on`/`off` manage the
    handlers behind it, which the socket.io client cannot remove itself.
    """

    def __init__(self, client: Optional[socketio.AsyncClient] = None):
        super().__init__()
        self.client = client or socketio.AsyncClient(reconnection=True)
        self._bound = set()

    def on(self, event: str, handler: Handler) -> None:
        if event not in self._bound:
            self.client.on(event, lambda payload=None, _event=event: self.emit(_event, payload))
            self._bound.add(event)
        super().on(event, handler)

    async def connect(self, url: str, user_id: str) -> None:
        """Open the session-scoped socket for `user_id`."""
        await self.client.connect(url, auth={"userId": user_id}, transports=["websocket", "polling"])
        logger.info(f"Realtime connected for user {user_id}")

    async def disconnect(self) -> None:
        await self.client.disconnect()


class RealtimeBridge:
    """Keeps exactly one inbound-message listener for the selected human peer."""

    def __init__(
        self,
        store: ConversationStore,
        source: Optional[EventSource],
        chime: Optional[MessageChime] = None,
    ):
        self.store = store
        self.source = source
        self.chime = chime or get_chime()
        self.peer_id: Optional[str] = None

    def subscribe(self) -> bool:
        """
        Listen for messages from the currently selected peer.

        Returns:
            True if a listener was registered
        """
        self.unsubscribe()
        peer = self.store.selected_peer
        if peer is None or not peer.supports_realtime_delivery or self.source is None:
            return False

        self.chime.init()
        peer_id = peer.id

        def on_new_message(payload: Any) -> None:
            try:
                message = Message.model_validate(payload)
            except ValidationError as e:
                logger.warning(f"Dropping malformed realtime message: {e}")
                return
            if message.sender_id != peer_id:
                return
            selected = self.store.selected_peer
            if selected is None or selected.id != peer_id:
                return
            self.store.append_inbound(message)
            self.chime.play()

        self.source.on(NEW_MESSAGE_EVENT, on_new_message)
        self.peer_id = peer_id
        logger.debug(f"Realtime subscribed for peer {peer_id}")
        return True

    def unsubscribe(self) -> None:
        if self.source is not None:
            self.source.off(NEW_MESSAGE_EVENT)
        self.peer_id = None

    def follow(self) -> Callable[[], None]:
        """Re-subscribe whenever the store's selected peer changes. Returns a stop function."""
        last = {"peer": self.store.selected_peer.id if self.store.selected_peer else None}

        def on_change(store: ConversationStore) -> None:
            current = store.selected_peer.id if store.selected_peer else None
            if current != last["peer"]:
                last["peer"] = current
                self.subscribe()

        stop = self.store.subscribe(on_change)
        self.subscribe()

        def stop_following():
            stop()
            self.unsubscribe()

        return stop_following
