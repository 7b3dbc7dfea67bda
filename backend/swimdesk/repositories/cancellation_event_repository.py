# backend/swimdesk/repositories/cancellation_event_repository.py
"""
Cancellation Event Repository for SwimDesk

Status changes go through ``transition_status``, a compare-and-set
UPDATE that only matches rows still in the expected status. Concurrent
approvals of the same event therefore resolve to exactly one winner.
"""

from dataclasses import dataclass
from datetime import datetime
import logging
from typing import Dict, Iterable, List, Optional

from sqlalchemy import func, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.enums import CatchUpApprovalStatus
from ..core.exceptions import RepositoryException
from ..models.cancellation_event import CancellationEvent
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PendingClientSummary:
    """One row of the per-client pending approvals list."""

    client_id: str
    pending_count: int
    oldest_cancelled_at: datetime


class CancellationEventRepository(BaseRepository[CancellationEvent]):
    """Repository for cancellation events and their catch-up status."""

    def __init__(self, db: Session):
        super().__init__(db, CancellationEvent)

    def get_for_business(self, event_id: str, business_id: str) -> Optional[CancellationEvent]:
        return self.find_one_by(id=event_id, business_id=business_id)

    def list_for_business(
        self,
        business_id: str,
        statuses: Optional[Iterable[CatchUpApprovalStatus]] = None,
        client_id: Optional[str] = None,
        limit: Optional[int] = None,
        newest_first: bool = True,
    ) -> List[CancellationEvent]:
        """Events for a business, newest first unless the queue is worked in arrival order."""
        query = self.db.query(CancellationEvent).filter(CancellationEvent.business_id == business_id)
        if statuses is not None:
            query = query.filter(
                CancellationEvent.catch_up_status.in_([status.value for status in statuses])
            )
        if client_id is not None:
            query = query.filter(CancellationEvent.client_id == client_id)
        if newest_first:
            query = query.order_by(CancellationEvent.cancelled_at.desc(), CancellationEvent.id.desc())
        else:
            query = query.order_by(CancellationEvent.cancelled_at, CancellationEvent.id)
        if limit is not None:
            query = query.limit(limit)
        return self._execute_query(query)

    def list_for_client(self, client_id: str, business_id: str) -> List[CancellationEvent]:
        """A client's cancellation history at one business, newest first."""
        query = (
            self.db.query(CancellationEvent)
            .filter(CancellationEvent.client_id == client_id, CancellationEvent.business_id == business_id)
            .order_by(CancellationEvent.cancelled_at.desc(), CancellationEvent.id.desc())
        )
        return self._execute_query(query)

    def list_pending_ids_for_client(self, client_id: str, business_id: str) -> List[str]:
        rows = self._execute_query(
            self.db.query(CancellationEvent.id)
            .filter(
                CancellationEvent.client_id == client_id,
                CancellationEvent.business_id == business_id,
                CancellationEvent.catch_up_status == CatchUpApprovalStatus.PENDING.value,
            )
            .order_by(CancellationEvent.cancelled_at, CancellationEvent.id)
        )
        return [row[0] for row in rows]

    def status_counts_for_client(self, client_id: str, business_id: str) -> Dict[CatchUpApprovalStatus, int]:
        """Number of the client's events at ``business_id`` in each status. Missing statuses count zero."""
        rows = self._execute_query(
            self.db.query(CancellationEvent.catch_up_status, func.count(CancellationEvent.id))
            .filter(CancellationEvent.client_id == client_id, CancellationEvent.business_id == business_id)
            .group_by(CancellationEvent.catch_up_status)
        )
        counts = {status: 0 for status in CatchUpApprovalStatus}
        for status_value, count in rows:
            counts[CatchUpApprovalStatus(status_value)] = int(count)
        return counts

    def pending_clients(self, business_id: str) -> List[PendingClientSummary]:
        """Clients with at least one pending request, longest waiting first."""
        oldest = func.min(CancellationEvent.cancelled_at)
        rows = self._execute_query(
            self.db.query(
                CancellationEvent.client_id,
                func.count(CancellationEvent.id),
                oldest,
            )
            .filter(
                CancellationEvent.business_id == business_id,
                CancellationEvent.catch_up_status == CatchUpApprovalStatus.PENDING.value,
            )
            .group_by(CancellationEvent.client_id)
            .order_by(oldest, CancellationEvent.client_id)
        )
        return [
            PendingClientSummary(client_id=client_id, pending_count=int(count), oldest_cancelled_at=first)
            for client_id, count, first in rows
        ]

    def transition_status(
        self,
        event_id: str,
        *,
        from_status: CatchUpApprovalStatus,
        to_status: CatchUpApprovalStatus,
        decided_at: datetime,
        decided_by_id: Optional[str],
    ) -> bool:
        """
        Move an event from ``from_status`` to ``to_status`` atomically.

        Returns:
            True if this call performed the transition, False if the event
            was not in ``from_status`` (or does not exist).
        """
        try:
            result = self.db.execute(
                update(CancellationEvent)
                .where(
                    CancellationEvent.id == event_id,
                    CancellationEvent.catch_up_status == from_status.value,
                )
                .values(
                    catch_up_status=to_status.value,
                    decided_at=decided_at,
                    decided_by_id=decided_by_id,
                )
                .execution_options(synchronize_session="fetch")
            )
            self.db.flush()
            return bool(result.rowcount)
        except SQLAlchemyError as e:
            self.logger.error(
                f"Error transitioning cancellation event {event_id} to {to_status.value}: {str(e)}"
            )
            raise RepositoryException(f"Failed to update catch-up status: {str(e)}")
