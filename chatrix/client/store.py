"""
Conversation store - the client's single source of truth for the open chat

Holds the roster, the selected peer and the visible timeline. Sending
branches on the peer's capabilities:

- Local-only peers (the AI): two-phase write. The user's message is committed
  to the timeline and the local archive first, then the server is asked for a
  reply, which is reconciled in (or replaced by a fallback apology).
- Other peers: the message is posted to the chat API and appended only once
  the server has accepted it.

Every peer change bumps a selection epoch. An async result is only surfaced
if the epoch it started under is still current.
"""

from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from loguru import logger

from chatrix.client.archive import LocalAIArchive
from chatrix.client.chime import MessageChime, get_chime
from chatrix.client.http import ApiError, ChatApiClient, retry_after_seconds
from chatrix.client.models import (
    AI_PEER,
    Message,
    MessageDraft,
    Notice,
    NoticeLevel,
    Peer,
    SendOutcome,
    SendPhase,
    peer_from_roster,
)
from chatrix.config.constants import (
    AI_ID,
    AI_LIMIT_RETRY_IN,
    AI_LIMIT_SHORTLY,
    AI_REQUEST_FAILED,
    CLIENT_APOLOGY_REPLY,
    CLIENT_NO_REPLY,
    FAILED_TO_LOAD_MESSAGES,
    FAILED_TO_LOAD_USERS,
    FAILED_TO_SEND,
    IMAGE_DISABLED_FOR_AI,
)
from chatrix.config.settings import settings

Listener = Callable[["ConversationStore"], None]


def project_history(messages: Sequence[Message], me: str, limit: Optional[int] = None) -> List[Dict[str, str]]:
    """
    Turn the tail of a timeline into AI history entries.

    A message is "user" when sent by `me`, otherwise "assistant".
    """
    limit = settings.ai_history_limit if limit is None else limit
    if limit <= 0:
        return []
    return [
        {"role": "user" if m.sender_id == me else "assistant", "content": m.text or ""}
        for m in list(messages)[-limit:]
    ]


def rate_limit_notice(error: ApiError) -> Notice:
    """Notice for a 429: the server's message, else a wait estimate from reset headers."""
    seconds = retry_after_seconds(error.headers)
    if error.message:
        text = error.message
    elif seconds:
        text = AI_LIMIT_RETRY_IN.format(seconds=seconds)
    else:
        text = AI_LIMIT_SHORTLY
    return Notice(message=text, level=NoticeLevel.ERROR, retry_after=seconds or None)


class ConversationStore:
    """Reactive state container for the chat screen."""

    def __init__(
        self,
        api: ChatApiClient,
        archive: LocalAIArchive,
        user_id: Optional[str] = None,
        chime: Optional[MessageChime] = None,
        on_notice: Optional[Callable[[Notice], None]] = None,
    ):
        self.api = api
        self.archive = archive
        self.user_id = user_id
        self.chime = chime or get_chime()
        self.on_notice = on_notice

        self.messages: List[Message] = []
        self.users: List[Peer] = []
        self.selected_peer: Optional[Peer] = None
        self.is_users_loading = False
        self.is_messages_loading = False
        self.is_sending = False
        self.phase = SendPhase.IDLE
        self.notices: List[Notice] = []

        self._selection_epoch = 0
        self._listeners: List[Listener] = []

    # ------------------------------------------------------------------
    # Reactivity
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call `listener(store)` after every state change. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set(self, **changes: Any) -> None:
        for name, value in changes.items():
            setattr(self, name, value)
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logger.exception("Store listener failed")

    def _notify(self, notice: Notice) -> None:
        self._set(notices=self.notices + [notice])
        if self.on_notice is not None:
            self.on_notice(notice)

    def dismiss_notices(self) -> None:
        self._set(notices=[])

    # ------------------------------------------------------------------
    # Identity and selection
    # ------------------------------------------------------------------

    @property
    def me(self) -> str:
        return self.user_id or "anon"

    @property
    def selection_epoch(self) -> int:
        return self._selection_epoch

    def set_user(self, user_id: Optional[str]) -> None:
        """
        Switch the signed-in user. An open AI conversation is reloaded from that user's archive.

        Bumps the selection epoch, so a reply still in flight for the previous
        user is archived for that user only and never shown to this one.
        """
        self._selection_epoch += 1
        self.user_id = user_id
        if self.selected_peer is not None and self.selected_peer.is_local_only:
            self._set(messages=self.archive.load(user_id))

    def select_peer(self, peer: Optional[Peer]) -> None:
        self._selection_epoch += 1
        self._set(selected_peer=peer)

    async def open_conversation(self, peer: Peer) -> None:
        self.select_peer(peer)
        await self.load_messages(peer)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def load_users(self) -> None:
        """Fetch the roster and make sure the AI peer is in it."""
        self._set(is_users_loading=True)
        try:
            entries = await self.api.get_users()
            peers = [peer_from_roster(e) for e in entries if isinstance(e, dict)]
            if not any(p.id == AI_ID for p in peers):
                peers = [AI_PEER] + peers
            self._set(users=peers)
        except ApiError as e:
            self._notify(Notice(message=e.message or FAILED_TO_LOAD_USERS))
        finally:
            self._set(is_users_loading=False)

    async def load_messages(self, peer: Peer) -> None:
        """Load a timeline: the local archive for the AI, the chat API otherwise."""
        epoch = self._selection_epoch
        self._set(is_messages_loading=True)
        try:
            if peer.is_local_only:
                messages = self.archive.load(self.user_id)
            else:
                messages = await self.api.get_messages(peer.id)
            if epoch == self._selection_epoch:
                self._set(messages=messages)
        except ApiError as e:
            self._notify(Notice(message=e.message or FAILED_TO_LOAD_MESSAGES))
        finally:
            self._set(is_messages_loading=False)

    def append_inbound(self, message: Message) -> None:
        """Append a message pushed by the realtime channel."""
        self._set(messages=self.messages + [message])

    # ------------------------------------------------------------------
    # Sending
    # ------------------------------------------------------------------

    async def send_message(self, draft: MessageDraft) -> SendOutcome:
        """
        Send what the user composed to the selected peer.

        A second call while one is in flight is ignored.
        """
        peer = self.selected_peer
        if peer is None or self.is_sending:
            return SendOutcome.IGNORED

        if peer.is_local_only:
            return await self._send_to_ai(peer, draft)
        return await self._post_to_peer(peer, draft)

    async def _send_to_ai(self, peer: Peer, draft: MessageDraft) -> SendOutcome:
        text = draft.trimmed
        if not text:
            return SendOutcome.IGNORED
        if draft.image and not peer.accepts_images:
            self._notify(Notice(message=IMAGE_DISABLED_FOR_AI, level=NoticeLevel.INFO))

        epoch = self._selection_epoch
        owner = self.user_id
        me = self.me
        self._set(is_sending=True, phase=SendPhase.SENDING_TO_AI)
        try:
            history = project_history(self.messages, me)
            committed = self._commit_local(owner, Message.compose(me, peer.id, text))
            outcome, reply_text = await self._reconcile_remote(text, history)
            if outcome is SendOutcome.SUPPRESSED_ON_RATE_LIMIT:
                return outcome

            reply = Message.compose(peer.id, me, reply_text)
            final = committed + [reply]
            self.archive.save(owner, final)

            if epoch == self._selection_epoch:
                self._set(messages=final)
                self.chime.play()
            elif self.selected_peer is not None and self.selected_peer.is_local_only:
                # left and came back while waiting; the archive is authoritative
                self._set(messages=self.archive.load(self.user_id))
            else:
                logger.debug("AI reply stored while another conversation is open")
            return outcome
        finally:
            self._set(is_sending=False, phase=SendPhase.IDLE)

    def _commit_local(self, owner: Optional[str], message: Message) -> List[Message]:
        """Phase one: append the user's message and persist before any network call."""
        updated = self.messages + [message]
        self._set(messages=updated)
        self.archive.save(owner, updated)
        return updated

    async def _reconcile_remote(self, text: str, history: List[Dict[str, str]]) -> Tuple[SendOutcome, str]:
        """Phase two: ask the server for a reply, or fall back without breaking the thread."""
        try:
            data = await self.api.ai_chat(text, history)
        except ApiError as e:
            if e.is_rate_limited:
                self._notify(rate_limit_notice(e))
                return SendOutcome.SUPPRESSED_ON_RATE_LIMIT, ""
            logger.warning(f"AI request failed: {e}")
            self._notify(Notice(message=e.message or AI_REQUEST_FAILED))
            return SendOutcome.SUPPRESSED_ON_ERROR, CLIENT_APOLOGY_REPLY

        reply = data.get("text")
        if not isinstance(reply, str) or not reply:
            reply = CLIENT_NO_REPLY
        return SendOutcome.APPENDED_REPLY, reply

    async def _post_to_peer(self, peer: Peer, draft: MessageDraft) -> SendOutcome:
        if draft.is_empty:
            return SendOutcome.IGNORED

        epoch = self._selection_epoch
        self._set(is_sending=True, phase=SendPhase.POSTING)
        try:
            message = await self.api.send_message(peer.id, draft.to_payload())
        except ApiError as e:
            self._notify(Notice(message=e.message or FAILED_TO_SEND))
            return SendOutcome.FAILED
        finally:
            self._set(is_sending=False, phase=SendPhase.IDLE)

        if epoch == self._selection_epoch:
            self._set(messages=self.messages + [message])
        return SendOutcome.APPENDED
