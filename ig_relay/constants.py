"""Application-wide constants.

This module centralizes protocol literals and defaults for the relay so the
webhook handlers, Graph client and CLI share a single source of truth.
"""

# =============================================================================
# Graph API
# =============================================================================

# Graph API base URL and version prefix
GRAPH_API_BASE_URL = "https://graph.facebook.com"
GRAPH_API_VERSION = "v21.0"

# Product channel named in outbound message payloads
MESSAGING_PRODUCT = "instagram"

# Page fields that may link a Page to its Instagram business account.
# Different setups expose either one, so both are requested.
INSTAGRAM_ACCOUNT_LINK_FIELDS = (
    "connected_instagram_account",
    "instagram_business_account",
)

# =============================================================================
# Webhook Protocol
# =============================================================================

# hub.mode value sent by the platform during the verification handshake
WEBHOOK_SUBSCRIBE_MODE = "subscribe"

# Header carrying the HMAC-SHA256 signature of the raw request body
SIGNATURE_HEADER = "x-hub-signature-256"

# Prefix of the signature header value
SIGNATURE_PREFIX = "sha256="

# =============================================================================
# Auto-reply
# =============================================================================

REPLY_TEMPLATE = 'Thanks for messaging us! You said: "{text}"'

# Substituted when the inbound message has no text (stickers, attachments)
NO_TEXT_PLACEHOLDER = "(no text)"

# =============================================================================
# Conversation Listing
# =============================================================================

DEFAULT_CONVERSATION_LIMIT = 25

# Maximum participants returned per conversation
CONVERSATION_PARTICIPANT_LIMIT = 50

# Keep the requested field set minimal to bound response size
CONVERSATION_FIELDS = (
    f"id,updated_time,participants.limit({CONVERSATION_PARTICIPANT_LIMIT})"
    "{id,username},link"
)

# =============================================================================
# Server
# =============================================================================

DEFAULT_PORT = 3000
