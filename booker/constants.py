"""Contract constants for the booking API and harness defaults.

Endpoint paths come from the API contract and do not vary between
environments. Environment-specific values (base URL, credentials) live in
the YAML configuration loaded by ``booker.config``.
"""

AUTH_PATH = "/auth/login"
"""Login endpoint issuing session tokens."""

BOOKING_PATH = "/booking"
"""Collection endpoint used to create bookings."""

BOOKING_BY_ID_PATH = "/booking/{id}"
"""Item endpoint for read, update, partial update and delete."""

HEALTH_PATH = "/booking/actuator/health"
"""Health endpoint of the booking service."""

JSON_CONTENT_TYPE = "application/json"
TEXT_CONTENT_TYPE = "text/plain"

COOKIE_HEADER = "Cookie"
TOKEN_COOKIE_NAME = "token"
"""Auth is carried as ``Cookie: token=<value>``, not as a bearer header."""

MASKED_SECRET = "********"
"""Stands in for passwords in logs and printed configuration."""

DEFAULT_ENVIRONMENT = "test"
DEFAULT_CONFIG_DIR = "config"
DEFAULT_REQUEST_TIMEOUT_SECONDS = 10.0
"""Upper bound for a single HTTP call.

A hung call surfaces as a TransportError once this expires; nothing cancels
calls actively.
"""

ENV_VAR_ENVIRONMENT = "BOOKER_ENV"
ENV_VAR_CONFIG_DIR = "BOOKER_CONFIG_DIR"
ENV_VAR_ARTIFACTS_DIR = "BOOKER_ARTIFACTS_DIR"
ENV_VAR_DEBUG = "BOOKER_DEBUG"

ROOM_ID_MIN = 1
ROOM_ID_MAX_EXCLUSIVE = 200
"""Generated room ids fall in [ROOM_ID_MIN, ROOM_ID_MAX_EXCLUSIVE)."""

CHECKIN_OFFSET_MONTHS = 2
"""Check-in starts this many months out to stay clear of past-date rules."""

CHECKIN_JITTER_DAYS = 100
"""Width of the forward window, in days, added on top of the month offset.

The API rejects bookings too far in the future, so the window stays well
inside six months.
"""

STAY_LENGTH_DAYS = 4

DELETE_SUCCESS_STATUSES = (200, 201)
"""Status codes accepted as a successful delete.

The live API answers 200 while the published contract documents 201.
"""

NON_EXISTENT_BOOKING_ID = 999999999
