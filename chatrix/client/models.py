"""
Client-side data model - messages, peers, drafts and notices

Wire names follow the chat API (`_id`, `senderId`, ...); Python code uses
snake_case attributes.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, ClassVar, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from chatrix.config.constants import AI_ID, AI_NAME, AI_PROFILE_PIC


def generate_id() -> str:
    """Client-side message id for the AI conversation (never round-trips to a server)."""
    return uuid.uuid4().hex


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class Message(BaseModel):
    """One chat message. Timelines are ordered by arrival, not by created_at."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(alias="_id")
    sender_id: str = Field(alias="senderId")
    receiver_id: str = Field(alias="receiverId")
    text: str = ""
    image: Optional[str] = None
    created_at: str = Field(default_factory=utc_now_iso, alias="createdAt")

    @field_validator("text", mode="before")
    @classmethod
    def _text_is_string(cls, value: Any) -> str:
        return value if isinstance(value, str) else ""

    @field_validator("id", "sender_id", "receiver_id", mode="before")
    @classmethod
    def _ids_are_strings(cls, value: Any) -> Any:
        return str(value) if isinstance(value, int) else value

    @classmethod
    def compose(cls, sender_id: str, receiver_id: str, text: str) -> "Message":
        """New locally-created message with a client-generated id."""
        return cls(id=generate_id(), sender_id=sender_id, receiver_id=receiver_id, text=text)

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class Peer(BaseModel):
    """
    A conversation partner in the roster.

    Subclasses declare how their conversation is delivered instead of
    callers comparing ids against the AI sentinel.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(alias="_id")
    full_name: str = Field(default="", alias="fullName")
    profile_pic: Optional[str] = Field(default=None, alias="profilePic")

    is_local_only: ClassVar[bool] = False
    supports_realtime_delivery: ClassVar[bool] = True
    accepts_images: ClassVar[bool] = True

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class HumanPeer(Peer):
    """Registered account; messages go through the chat API and socket events."""


class AIPeer(Peer):
    """Synthetic participant; its timeline lives only in the local archive."""

    is_ai: bool = Field(default=True, alias="isAI")

    is_local_only: ClassVar[bool] = True
    supports_realtime_delivery: ClassVar[bool] = False
    accepts_images: ClassVar[bool] = False


AI_PEER = AIPeer(id=AI_ID, full_name=AI_NAME, profile_pic=AI_PROFILE_PIC)


def peer_from_roster(entry: Dict[str, Any]) -> Peer:
    """Build the right Peer subclass from a roster entry."""
    if entry.get("_id", entry.get("id")) == AI_ID or entry.get("isAI"):
        return AIPeer.model_validate(entry)
    return HumanPeer.model_validate(entry)


@dataclass
class MessageDraft:
    """What the user composed: text and/or an image data URL."""
    text: str = ""
    image: Optional[str] = None

    @property
    def trimmed(self) -> str:
        return self.text.strip() if isinstance(self.text, str) else ""

    @property
    def is_empty(self) -> bool:
        return not self.trimmed and not self.image

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"text": self.trimmed}
        if self.image:
            payload["image"] = self.image
        return payload


class NoticeLevel(str, Enum):
    INFO = "info"
    ERROR = "error"


@dataclass
class Notice:
    """Transient user-facing notice (a toast); never part of the timeline."""
    message: str
    level: NoticeLevel = NoticeLevel.ERROR
    retry_after: Optional[int] = None


class SendPhase(str, Enum):
    IDLE = "idle"
    SENDING_TO_AI = "sending_to_ai"
    POSTING = "posting"


class SendOutcome(str, Enum):
    IGNORED = "ignored"
    APPENDED_REPLY = "appended_reply"
    SUPPRESSED_ON_RATE_LIMIT = "suppressed_on_rate_limit"
    SUPPRESSED_ON_ERROR = "suppressed_on_error"
    APPENDED = "appended"
    FAILED = "failed"
