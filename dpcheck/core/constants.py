"""Shared constants: timeouts, ingestion API surface and retry defaults."""

from dpcheck import __version__

# Timeouts (milliseconds)
DEFAULT_WAIT_MS = 15000
LONG_WAIT_MS = 30000
SHORT_WAIT_MS = 5000
PAGE_LOAD_MS = 30000
API_REQUEST_MS = 30000

# Ingestion API
EVENT_ENDPOINTS = {
    "identify": "/v1/identify",
    "track": "/v1/track",
    "page": "/v1/page",
    "screen": "/v1/screen",
    "group": "/v1/group",
    "alias": "/v1/alias",
}
CONTENT_TYPE = "application/json"
USER_AGENT = f"dpcheck/{__version__}"

# Retry defaults
RETRY_MAX_ATTEMPTS = 3
RETRY_INITIAL_DELAY_MS = 1000
RETRY_BACKOFF_FACTOR = 2.0
RETRY_MAX_DELAY_MS = 10000

# Payload fixtures
TIMESTAMP_PLACEHOLDER = "{{CURRENT_TIMESTAMP}}"
TIMESTAMP_FIELD = "timestamp"

# Dashboard
DEFAULT_BASE_URL = "https://app.rudderstack.com"
DEFAULT_ENVIRONMENT = "qa"
ENVIRONMENT_ENV = "DPCHECK_ENV"

# Scenario steps, in the order a full dashboard run executes them
SCENARIO_STEPS = (
    "login",
    "open_connections",
    "store_data_plane_url",
    "store_write_key",
    "send_event",
    "open_destination",
    "open_events_tab",
    "read_event_counts",
)
