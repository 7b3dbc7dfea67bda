# backend/swimdesk/repositories/session_repository.py
"""
Session Repository for SwimDesk

Data access for scheduled class sessions, including the aggregate
queries used to derive open catch-up slots.
"""

from datetime import datetime
import logging
from typing import Dict, List, Optional, Sequence

from sqlalchemy import and_, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.enums import EnrollmentStatus
from ..core.exceptions import RepositoryException
from ..database.session_utils import supports_row_locks
from ..models.cancellation_event import CancellationEvent
from ..models.class_session import ClassSession
from ..models.enrollment import Enrollment
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class SessionRepository(BaseRepository[ClassSession]):
    """Repository for class sessions."""

    def __init__(self, db: Session):
        super().__init__(db, ClassSession)

    def get_for_business(
        self, session_id: str, business_id: str, for_update: bool = False
    ) -> Optional[ClassSession]:
        """
        Get a session scoped to a business; other tenants' sessions read as missing.

        ``for_update`` serializes seat allocation on the session. SQLite has no
        row locks, so there the row is touched first, which takes the database
        write lock before any capacity count is read.
        """
        try:
            query = self.db.query(ClassSession).filter(
                ClassSession.id == session_id,
                ClassSession.business_id == business_id,
            )
            if for_update:
                if supports_row_locks(self.db):
                    query = self._lock(query)
                else:
                    query.update({ClassSession.updated_at: ClassSession.updated_at}, synchronize_session=False)
            return query.first()
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting session {session_id}: {str(e)}")
            raise RepositoryException(f"Failed to get session: {str(e)}")

    def list_for_business(
        self,
        business_id: str,
        *,
        starts_after: Optional[datetime] = None,
        starts_before: Optional[datetime] = None,
        instructor_id: Optional[str] = None,
        include_inactive: bool = False,
    ) -> List[ClassSession]:
        """List a business's sessions ordered by start time."""
        query = self.db.query(ClassSession).filter(ClassSession.business_id == business_id)
        if starts_after is not None:
            query = query.filter(ClassSession.starts_at >= starts_after)
        if starts_before is not None:
            query = query.filter(ClassSession.starts_at < starts_before)
        if instructor_id is not None:
            query = query.filter(ClassSession.instructor_id == instructor_id)
        if not include_inactive:
            query = query.filter(ClassSession.is_active.is_(True))
        return self._execute_query(query.order_by(ClassSession.starts_at, ClassSession.id))

    def list_with_cancellations(
        self,
        business_id: str,
        starts_after: datetime,
        starts_before: datetime,
    ) -> List[ClassSession]:
        """
        Active sessions in the window that have at least one cancellation.

        These are the only candidates for catch-up slots.
        """
        query = (
            self.db.query(ClassSession)
            .join(CancellationEvent, CancellationEvent.session_id == ClassSession.id)
            .filter(
                ClassSession.business_id == business_id,
                ClassSession.is_active.is_(True),
                ClassSession.starts_at > starts_after,
                ClassSession.starts_at < starts_before,
            )
            .distinct()
            .order_by(ClassSession.starts_at, ClassSession.id)
        )
        return self._execute_query(query)

    # Aggregates

    def count_active_enrollments(self, session_id: str) -> int:
        query = self.db.query(func.count(Enrollment.id)).filter(
            Enrollment.session_id == session_id,
            Enrollment.status == EnrollmentStatus.ACTIVE.value,
        )
        return int(self._execute_scalar(query) or 0)

    def active_counts(self, session_ids: Sequence[str]) -> Dict[str, int]:
        """Active enrollment count keyed by session id."""
        if not session_ids:
            return {}
        rows = self._execute_query(
            self.db.query(Enrollment.session_id, func.count(Enrollment.id))
            .filter(
                Enrollment.session_id.in_(list(session_ids)),
                Enrollment.status == EnrollmentStatus.ACTIVE.value,
            )
            .group_by(Enrollment.session_id)
        )
        return {session_id: int(count) for session_id, count in rows}

    def catch_up_counts(self, session_ids: Sequence[str]) -> Dict[str, int]:
        """
        Catch-up enrollments ever made per session, cancelled ones included.

        A cancelled catch-up seat produces its own cancellation event, so
        counting it here keeps the freed-seat arithmetic balanced.
        """
        if not session_ids:
            return {}
        rows = self._execute_query(
            self.db.query(Enrollment.session_id, func.count(Enrollment.id))
            .filter(
                Enrollment.session_id.in_(list(session_ids)),
                Enrollment.is_catch_up.is_(True),
            )
            .group_by(Enrollment.session_id)
        )
        return {session_id: int(count) for session_id, count in rows}

    def cancellation_stats(
        self,
        session_ids: Sequence[str],
        exclude_client_id: Optional[str] = None,
    ) -> Dict[str, tuple[int, datetime]]:
        """
        (cancellation count, latest cancellation time) per session.

        Cancellations made by ``exclude_client_id`` are ignored so a client
        is never offered their own freed seat.
        """
        if not session_ids:
            return {}
        conditions = [CancellationEvent.session_id.in_(list(session_ids))]
        if exclude_client_id is not None:
            conditions.append(CancellationEvent.client_id != exclude_client_id)
        rows = self._execute_query(
            self.db.query(
                CancellationEvent.session_id,
                func.count(CancellationEvent.id),
                func.max(CancellationEvent.cancelled_at),
            )
            .filter(and_(*conditions))
            .group_by(CancellationEvent.session_id)
        )
        return {session_id: (int(count), latest) for session_id, count, latest in rows}
