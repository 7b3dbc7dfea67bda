# backend/swimdesk/schemas/session.py
"""
Class session schemas.

Sessions are created by staff, optionally as a weekly series. All
datetimes are accepted with an offset and normalized to UTC.
"""

from datetime import date, datetime, timezone
from typing import List, Optional

from pydantic import Field, field_validator, model_validator

from ..core.constants import MAX_SESSION_CAPACITY, MAX_SESSION_DURATION, MIN_SESSION_DURATION
from ..core.enums import RecurrenceFrequency
from ._strict_base import ORMResponseModel, StrictRequestModel, UTCDateTime


class RecurrenceRule(StrictRequestModel):
    """Repeat a session every week up to and including ``until``."""

    frequency: RecurrenceFrequency = RecurrenceFrequency.WEEKLY
    until: date = Field(..., description="Last date on which an occurrence may start")


class SessionCreate(StrictRequestModel):
    class_id: str = Field(..., min_length=1, max_length=26)
    class_title: str = Field(..., min_length=1, max_length=200)
    instructor_id: str = Field(..., min_length=1, max_length=26)
    starts_at: datetime
    ends_at: datetime
    capacity: int = Field(..., ge=1, le=MAX_SESSION_CAPACITY)
    notes: Optional[str] = Field(None, max_length=2000)
    recurrence: Optional[RecurrenceRule] = None

    @field_validator("starts_at", "ends_at")
    @classmethod
    def _to_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            raise ValueError("datetime must include a timezone offset")
        return value.astimezone(timezone.utc)

    @model_validator(mode="after")
    def _check_window(self) -> "SessionCreate":
        if self.ends_at <= self.starts_at:
            raise ValueError("ends_at must be after starts_at")
        minutes = (self.ends_at - self.starts_at).total_seconds() / 60
        if minutes < MIN_SESSION_DURATION or minutes > MAX_SESSION_DURATION:
            raise ValueError(
                f"Session length must be between {MIN_SESSION_DURATION} and {MAX_SESSION_DURATION} minutes"
            )
        if self.recurrence is not None and self.recurrence.until < self.starts_at.date():
            raise ValueError("recurrence.until must not be before the first occurrence")
        return self


class SessionResponse(ORMResponseModel):
    id: str
    business_id: str
    class_id: str
    instructor_id: str
    class_title: str
    starts_at: UTCDateTime
    ends_at: UTCDateTime
    capacity: int
    series_id: Optional[str] = None
    notes: Optional[str] = None
    is_active: bool


class SessionListResponse(ORMResponseModel):
    sessions: List[SessionResponse]
    total: int
