"""HTTP constants for the fetch layer.

Centralizes all HTTP-related constants to avoid duplication across modules.
"""

# Only a plain 200 counts as success
HTTP_STATUS_OK = 200

# Request defaults
DEFAULT_TIMEOUT_SECONDS = 3.0
DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_USER_AGENT = "psm-monitor/1.0"

# Methods supported by the retry controller
METHOD_GET = "GET"
METHOD_POST = "POST"

CONTENT_TYPE_JSON = "application/json"

# Correlation ids are random unsigned 32-bit integers
REQUEST_ID_BITS = 32

# Maximum payload characters echoed into the request log line
MAX_LOGGED_PAYLOAD_CHARS = 512
