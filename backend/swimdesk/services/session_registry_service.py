# backend/swimdesk/services/session_registry_service.py
"""
Session Registry Service for SwimDesk

Source of truth for session definitions and rosters, and the only place
that decides which sessions currently count as open catch-up slots.

A seat is "freed" each time another client cancels out of a session and
is "refilled" each time a catch-up enrollment is placed into it. A
session is an open catch-up slot while freed seats exceed refills and
the roster is still below capacity.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
import logging
from typing import List, Optional


from ..core.config import settings
from ..core.constants import MAX_RECURRING_OCCURRENCES
from ..core.exceptions import SessionNotFoundException, ValidationException
from ..core.ulid_helper import generate_ulid
from ..models.class_session import ClassSession
from ..models.enrollment import Enrollment
from ..repositories.factory import RepositoryFactory
from ..schemas.session import SessionCreate
from ..utils.time_utils import ensure_utc, utc_now
from .base import BaseService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CatchUpSlot:
    """A session with a seat freed by someone else's cancellation."""

    session: ClassSession
    freed_seats: int
    available_seats: int
    last_cancelled_at: datetime

    @property
    def reason(self) -> str:
        return f"slot opened due to cancellation on {self.last_cancelled_at.date().isoformat()}"


class SessionRegistryService(BaseService):
    """Scheduling operations and catch-up slot discovery."""

    def __init__(self, db):
        super().__init__(db)
        self.session_repository = RepositoryFactory.create_session_repository(db)
        self.enrollment_repository = RepositoryFactory.create_enrollment_repository(db)

    # Writes

    @BaseService.measure_operation("create_session")
    def create_session(
        self, business_id: str, data: SessionCreate, created_by_id: Optional[str] = None
    ) -> List[ClassSession]:
        """
        Create a session, or one session per week when a recurrence is given.

        Returns:
            The created occurrences in start order.
        """
        occurrences = self._expand_occurrences(data)
        series_id = generate_ulid() if len(occurrences) > 1 else None

        with self.transaction():
            created = [
                self.session_repository.create(
                    business_id=business_id,
                    class_id=data.class_id,
                    instructor_id=data.instructor_id,
                    class_title=data.class_title,
                    starts_at=starts_at,
                    ends_at=ends_at,
                    capacity=data.capacity,
                    notes=data.notes,
                    series_id=series_id,
                    is_active=True,
                )
                for starts_at, ends_at in occurrences
            ]

        self.log_operation(
            "create_session",
            business_id=business_id,
            created_by_id=created_by_id,
            occurrences=len(created),
            series_id=series_id,
        )
        return created

    def _expand_occurrences(self, data: SessionCreate) -> List[tuple[datetime, datetime]]:
        duration = data.ends_at - data.starts_at
        if data.recurrence is None:
            return [(data.starts_at, data.ends_at)]

        occurrences: List[tuple[datetime, datetime]] = []
        starts_at = data.starts_at
        while starts_at.date() <= data.recurrence.until:
            occurrences.append((starts_at, starts_at + duration))
            if len(occurrences) > MAX_RECURRING_OCCURRENCES:
                raise ValidationException(
                    f"A recurring series may not exceed {MAX_RECURRING_OCCURRENCES} occurrences",
                    code="TOO_MANY_OCCURRENCES",
                    details={"max_occurrences": MAX_RECURRING_OCCURRENCES},
                )
            starts_at = starts_at + timedelta(weeks=1)
        return occurrences

    @BaseService.measure_operation("deactivate_session")
    def deactivate_session(self, session_id: str, business_id: str) -> ClassSession:
        """Soft-deactivate a session. Existing enrollments are left untouched."""
        with self.transaction():
            session = self.get_session(session_id, business_id)
            if session.is_active:
                session.is_active = False
                session.deactivated_at = utc_now()
                self.session_repository.flush()
        self.log_operation("deactivate_session", session_id=session_id, business_id=business_id)
        return session

    # Reads

    def get_session(self, session_id: str, business_id: Optional[str] = None) -> ClassSession:
        """
        Get a session by id.

        When ``business_id`` is given, sessions of other businesses are
        reported as not found.

        Raises:
            SessionNotFoundException: Unknown id
        """
        if business_id is None:
            session = self.session_repository.get_by_id(session_id)
        else:
            session = self.session_repository.get_for_business(session_id, business_id)
        if session is None:
            raise SessionNotFoundException(session_id)
        return session

    def list_sessions(
        self,
        business_id: str,
        *,
        include_inactive: bool = False,
        from_date: Optional[datetime] = None,
        instructor_id: Optional[str] = None,
    ) -> List[ClassSession]:
        return self.session_repository.list_for_business(
            business_id,
            starts_after=ensure_utc(from_date),
            instructor_id=instructor_id,
            include_inactive=include_inactive,
        )

    def get_roster(self, session_id: str, business_id: str) -> List[Enrollment]:
        """Active enrollments for a session."""
        self.get_session(session_id, business_id)
        return self.enrollment_repository.list_active_for_session(session_id)

    @BaseService.measure_operation("list_open_catch_up_slots")
    def list_open_catch_up_slots(
        self,
        business_id: str,
        client_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> List[CatchUpSlot]:
        """
        Sessions that currently have a cancelled-and-unfilled seat.

        With ``client_id`` the view is personalised: the client's own
        cancellations do not open slots for them, and sessions they are
        already enrolled in are left out.
        """
        current = now or utc_now()
        candidates = self.session_repository.list_with_cancellations(
            business_id,
            starts_after=current,
            starts_before=current + timedelta(days=settings.catch_up_slot_lookahead_days),
        )
        return self._evaluate_slots(candidates, client_id)

    def get_open_slot(
        self,
        session: ClassSession,
        client_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Optional[CatchUpSlot]:
        """The slot view of one session, or None when it is not an open catch-up slot."""
        if not session.is_active or session.has_started(now or utc_now()):
            return None
        slots = self._evaluate_slots([session], client_id)
        return slots[0] if slots else None

    def _evaluate_slots(
        self, sessions: List[ClassSession], client_id: Optional[str]
    ) -> List[CatchUpSlot]:
        if not sessions:
            return []
        session_ids = [session.id for session in sessions]
        cancellations = self.session_repository.cancellation_stats(session_ids, exclude_client_id=client_id)
        refills = self.session_repository.catch_up_counts(session_ids)
        active = self.session_repository.active_counts(session_ids)

        slots: List[CatchUpSlot] = []
        for session in sessions:
            if session.id not in cancellations:
                continue
            if client_id is not None and self.enrollment_repository.get_active(session.id, client_id):
                continue
            cancelled_count, last_cancelled_at = cancellations[session.id]
            freed = cancelled_count - refills.get(session.id, 0)
            available = session.capacity - active.get(session.id, 0)
            if freed <= 0 or available <= 0:
                continue
            slots.append(
                CatchUpSlot(
                    session=session,
                    freed_seats=min(freed, available),
                    available_seats=available,
                    last_cancelled_at=ensure_utc(last_cancelled_at),
                )
            )
        return slots
