# backend/swimdesk/models/class_session.py
"""
Class session model for the SwimDesk platform.

A ClassSession is one scheduled occurrence of a class (e.g. "Level 2
Freestyle, Tuesday 17:00") with a fixed capacity and a roster of
enrollments. Recurring schedules are expanded into one row per
occurrence sharing a ``series_id``.

Sessions are never hard-deleted once enrollments reference them;
scheduling deactivates them instead.
"""

from datetime import datetime, timezone
import logging
from typing import Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..database import Base

logger = logging.getLogger(__name__)


class ClassSession(Base):
    """Scheduled occurrence of a class with a capacity-bounded roster."""

    __tablename__ = "class_sessions"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))

    # References owned by the external record store
    business_id = Column(String(26), nullable=False, index=True)
    class_id = Column(String(26), nullable=False)
    instructor_id = Column(String(26), nullable=False, index=True)

    class_title = Column(String(200), nullable=False)
    starts_at = Column(DateTime(timezone=True), nullable=False, index=True)
    ends_at = Column(DateTime(timezone=True), nullable=False)
    capacity = Column(Integer, nullable=False)

    # Recurrence: occurrences created together share a series id
    series_id = Column(String(26), nullable=True, index=True)
    notes = Column(Text, nullable=True)

    is_active = Column(Boolean, nullable=False, default=True)
    deactivated_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    enrollments = relationship(
        "Enrollment",
        back_populates="session",
        lazy="select",
        order_by="Enrollment.enrolled_at",
    )

    __table_args__ = (
        CheckConstraint("capacity >= 1", name="ck_class_sessions_capacity_positive"),
        CheckConstraint("ends_at > starts_at", name="ck_class_sessions_time_order"),
        Index("ix_class_sessions_business_starts", "business_id", "starts_at"),
    )

    def has_started(self, now: Optional[datetime] = None) -> bool:
        """Whether the session start time has passed."""
        current = now or datetime.now(timezone.utc)
        starts_at = self.starts_at
        if starts_at.tzinfo is None:
            # SQLite drops tzinfo; stored values are always UTC
            starts_at = starts_at.replace(tzinfo=timezone.utc)
        return starts_at <= current

    @property
    def duration_minutes(self) -> int:
        return int((self.ends_at - self.starts_at).total_seconds() // 60)

    def __repr__(self) -> str:
        return (
            f"<ClassSession {self.id}: {self.class_title} at {self.starts_at} "
            f"capacity={self.capacity} active={self.is_active}>"
        )
