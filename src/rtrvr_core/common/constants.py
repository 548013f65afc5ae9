"""Constants used throughout rtrvr-core."""

# Default endpoints
DEFAULT_CLOUD_BASE_URL = "https://api.rtrvr.ai"
DEFAULT_MCP_BASE_URL = "https://mcp.rtrvr.ai"
DEFAULT_CONTROL_BASE_URL = "https://cli.rtrvr.ai"

# Request execution
DEFAULT_TIMEOUT = 9 * 60  # 9 minutes
DEFAULT_MAX_ATTEMPTS = 1
MAX_ATTEMPTS_LIMIT = 10
DEFAULT_BASE_DELAY_MS = 250
MIN_BASE_DELAY_MS = 25
DEFAULT_MAX_DELAY_MS = 4_000
DEFAULT_RETRIABLE_STATUS_CODES = frozenset({408, 425, 429, 500, 502, 503, 504})
BACKOFF_JITTER_RATIO = 0.2

# Auth token prefixes
CLOUD_TOKEN_PREFIX = "rtrvr_"  # cloud + control plane + hub
HUB_TOKEN_PREFIX = "mcp_at_"  # hub only

# Headers
REQUEST_ID_HEADER = "x-request-id"
JSON_CONTENT_TYPE = "application/json"
EVENT_STREAM_CONTENT_TYPE = "text/event-stream"

# Event stream
DEFAULT_STREAM_STARTUP_GRACE = 20.0  # seconds
DEFAULT_STREAM_RETRY_INTERVAL = 0.6  # seconds
STREAM_NOT_READY_STATUSES = frozenset({404, 409, 425})
DEFAULT_EVENT_NAME = "message"
DEFAULT_PHASE = 1

# Payload size policy
INLINE_PAYLOAD_LIMIT_BYTES = 1_048_576
