"""
Incoming-message chime

One process-wide sound resource, initialized lazily. `init()` is idempotent
and `play()` initializes on demand, so callers never need to prime it first.
Actual playback is delegated to an AudioBackend.
"""

import threading
from typing import Optional, Protocol

from loguru import logger

# (mime type to check, source) in order of preference; None always matches
SOUND_SOURCES = (
    ('audio/ogg; codecs="vorbis"', "sounds/notify.ogg"),
    (None, "sounds/notify.mp3"),
)
DEFAULT_VOLUME = 0.85


class AudioBackend(Protocol):
    def can_play(self, mime_type: str) -> bool: ...

    def load(self, source: str, volume: float) -> None: ...

    def play(self) -> None: ...


class LoggingAudioBackend:
    """Backend for headless clients: records plays in the log."""

    def __init__(self, supported=("audio/ogg",)):
        self.supported = supported
        self.source = None
        self.plays = 0

    def can_play(self, mime_type: str) -> bool:
        return any(mime_type.startswith(s) for s in self.supported)

    def load(self, source: str, volume: float) -> None:
        self.source = source
        logger.debug(f"Chime loaded {source} at volume {volume}")

    def play(self) -> None:
        self.plays += 1
        logger.debug(f"Chime: {self.source}")


def pick_sound_source(backend: AudioBackend) -> str:
    for mime_type, source in SOUND_SOURCES:
        if mime_type is None or backend.can_play(mime_type):
            return source
    return SOUND_SOURCES[-1][1]


class MessageChime:
    """Lazily-initialized notification sound."""

    def __init__(self, backend: Optional[AudioBackend] = None, volume: float = DEFAULT_VOLUME):
        self.backend = backend or LoggingAudioBackend()
        self.volume = volume
        self.source: Optional[str] = None
        self._initialized = False
        self._lock = threading.Lock()

    @property
    def initialized(self) -> bool:
        return self._initialized

    def init(self) -> None:
        """Pick a source and load it. Calling again is a no-op."""
        with self._lock:
            if self._initialized:
                return
            self.source = pick_sound_source(self.backend)
            self.backend.load(self.source, self.volume)
            self._initialized = True

    def play(self) -> None:
        """Play the chime; playback failures are logged and dropped."""
        self.init()
        try:
            self.backend.play()
        except Exception as e:
            logger.debug(f"Chime playback failed: {e}")


# Global instance (singleton pattern)
_chime: Optional[MessageChime] = None


def get_chime() -> MessageChime:
    """Get the process-wide chime (created on first use)"""
    global _chime
    if _chime is None:
        _chime = MessageChime()
    return _chime
