"""
Chatrix - 1-to-1 chat with a synthetic AI participant.

Server side (chatrix.api, chatrix.ai, chatrix.ratelimit) turns a user message
plus history into a moderated, rate-limited completion call. Client side
(chatrix.client) keeps the dual-mode message timeline.
"""

__version__ = "1.0.0"
