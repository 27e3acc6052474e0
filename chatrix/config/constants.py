"""
Application constants

Centralized constants shared by the server and the client.
"""

# ============================================================================
# Synthetic AI participant
# ============================================================================

AI_ID = "ai-assistant"
AI_NAME = "Chatrix AI"
AI_PROFILE_PIC = "/ai.jpg"


# ============================================================================
# Rate limiting
# ============================================================================

TIER_BURST = "burst"
TIER_MINUTE = "minute"
TIER_DAILY = "daily"
TIER_PROVIDER = "provider"

BURST_LIMIT_MESSAGE = "Please wait a couple seconds before your next AI request."
MINUTE_LIMIT_MESSAGE = "Too many AI requests. Try again in a minute."
DAILY_LIMIT_MESSAGE = "Daily AI chat limit reached. Try again tomorrow."
PROVIDER_LIMIT_MESSAGE = "AI rate limit reached. Try again shortly."


# ============================================================================
# Server replies
# ============================================================================

FALLBACK_REPLY = "Sorry, I could not generate a reply."
MISSING_CREDENTIALS_MESSAGE = "AI provider API key missing on server"
GATEWAY_FAILURE_MESSAGE = "AI error"
INVALID_MESSAGE_MESSAGE = "message (string) is required"
UNAUTHENTICATED_MESSAGE = "Unauthorized - No identity provided"


# ============================================================================
# Client notices
# ============================================================================

CLIENT_APOLOGY_REPLY = "I ran into an error. Please try again."
CLIENT_NO_REPLY = "Sorry, I couldn't generate a reply."
AI_REQUEST_FAILED = "AI request failed"
AI_LIMIT_RETRY_IN = "AI limit reached. Try again in {seconds}s."
AI_LIMIT_SHORTLY = "AI limit reached. Try again shortly."
IMAGE_DISABLED_FOR_AI = "Image upload is disabled in AI chat"
FAILED_TO_SEND = "Failed to send"
FAILED_TO_LOAD_USERS = "Failed to load users"
FAILED_TO_LOAD_MESSAGES = "Failed to load messages"

NEW_MESSAGE_EVENT = "newMessage"
