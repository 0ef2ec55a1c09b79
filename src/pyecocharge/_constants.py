"""Internal constants shared across the library."""

BASE_URL = "http://127.0.0.1:8000"
USER_AGENT = "pyecocharge/1"

#: Storage key of the admin credential.
CREDENTIAL_KEY = "admin_token"

#: Seconds between two dashboard fetches.
DEFAULT_POLL_INTERVAL: float = 2.0
DEFAULT_REQUEST_TIMEOUT: float = 10.0

CONNECT_ENDPOINT = "/connect"
LOGIN_ENDPOINT = "/admin/login"
DASHBOARD_ENDPOINT = "/admin/dashboard_stats"

# ------------------------------------------------------------------
# Custom (bounded) charging limit in kWh
# ------------------------------------------------------------------

MIN_LIMIT_KWH = 10
MAX_LIMIT_KWH = 100
DEFAULT_LIMIT_KWH = 50

# ------------------------------------------------------------------
# Dashboard thresholds
# ------------------------------------------------------------------

HIGH_LOAD_PERCENT = 70.0
GREEN_SCORE_HIGH = 80
GREEN_SCORE_MEDIUM = 50

# ------------------------------------------------------------------
# User-visible messages
# ------------------------------------------------------------------

MSG_INVALID_VEHICLE = "Please enter a valid vehicle number"
MSG_CONNECT_OK = "Vehicle connected successfully!"
MSG_CONNECT_FAILED = "Connection failed"
MSG_LOGIN_OK = "Login successful!"
MSG_LOGIN_FAILED = "Login failed"
