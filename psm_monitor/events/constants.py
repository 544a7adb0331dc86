"""Constants for the event feed paginator."""

# Feed paths, relative to the event server base URL
BLOCK_EVENTS_PATH = "v1/blocks/{block_number}/events?limit=200"
LATEST_EVENTS_PATH = "v1/blocks/latest/events?limit=200"

# Upper bound on pages followed in one drain
DEFAULT_MAX_PAGES = 1000
