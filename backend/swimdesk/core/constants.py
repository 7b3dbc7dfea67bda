"""Application-wide constants for the SwimDesk platform."""

BRAND_NAME = "SwimDesk"

# Session scheduling constraints
MIN_SESSION_DURATION = 15  # minutes
MAX_SESSION_DURATION = 240  # minutes (4 hours)
MAX_SESSION_CAPACITY = 200
MAX_RECURRING_OCCURRENCES = 52  # one year of weekly sessions

# Outbox event types
EVENT_CATCH_UP_REQUESTED = "catch_up.requested"
EVENT_CATCH_UP_APPROVED = "catch_up.approved"
EVENT_CATCH_UP_REJECTED = "catch_up.rejected"
EVENT_CATCH_UP_BOOKED = "catch_up.booked"
