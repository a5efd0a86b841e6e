"""WebSocket protocol constants: message types, lifecycle events and error codes.

Pure data module -- no imports, no logic. Safe to import from any relay
module without risk of circular dependencies.
"""

# ── Browser -> Relay message types ────────────────────────────────────

MSG_START_INTERVIEW = "startInterview"
MSG_START_CODING_INTERVIEW = "startCodingInterview"
MSG_CODE_SNAPSHOT = "codeSnapshot"
MSG_CODING_VOICE_DOUBT_START = "codingVoiceDoubtStart"
MSG_CONTENT_UPDATE_TEXT = "contentUpdateText"
MSG_LIVE_CODE_UPDATE = "liveCodeUpdate"
MSG_REALTIME_INPUT = "realtimeInput"

# ── Relay -> Browser message types ────────────────────────────────────

MSG_TEXT_STREAM = "textStream"
MSG_AUDIO_STREAM = "audioStream"
MSG_ERROR = "error"

# ── Upstream session lifecycle events ─────────────────────────────────

LIFECYCLE_OPEN = "open"
LIFECYCLE_ERROR = "error"
LIFECYCLE_CLOSE = "close"

# ── Error codes (machine-readable, included in MSG_ERROR messages) ────

ERR_UPSTREAM_ERROR = "UPSTREAM_ERROR"
ERR_UPSTREAM_CLOSED = "UPSTREAM_CLOSED"
