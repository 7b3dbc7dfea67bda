# backend/swimdesk/services/dashboard_service.py
"""
Client dashboard snapshot.

Every figure is read from the ledger and event tables on request and
covers the caller's business only; nothing here is cached or stored.
"""

from dataclasses import dataclass
import logging
from typing import List, Optional

from ..core.enums import CatchUpApprovalStatus
from ..models.cancellation_event import CancellationEvent
from ..models.enrollment import Enrollment
from ..repositories.factory import RepositoryFactory
from ..utils.time_utils import utc_now
from .base import BaseService
from .catch_up_approval_service import aggregate_status
from .session_registry_service import CatchUpSlot, SessionRegistryService

logger = logging.getLogger(__name__)

RECENT_CANCELLATIONS_LIMIT = 10


@dataclass(frozen=True)
class ClientDashboard:
    client_id: str
    cancellation_count: int
    has_cancelled_before: bool
    catch_up_pre_approved: bool
    catch_up_approval_status: CatchUpApprovalStatus
    catch_up_credits: int
    upcoming_enrollments: List[Enrollment]
    open_catch_up_slots: List[CatchUpSlot]
    recent_cancellations: List[CancellationEvent]


class DashboardService(BaseService):
    def __init__(self, db, session_registry: Optional[SessionRegistryService] = None):
        super().__init__(db)
        self.session_registry = session_registry or SessionRegistryService(db)
        self.profile_repository = RepositoryFactory.create_client_profile_repository(db)
        self.credit_repository = RepositoryFactory.create_credit_ledger_repository(db)
        self.event_repository = RepositoryFactory.create_cancellation_event_repository(db)
        self.enrollment_repository = RepositoryFactory.create_enrollment_repository(db)

    @BaseService.measure_operation("get_client_dashboard")
    def get_client_dashboard(self, client_id: str, business_id: str) -> ClientDashboard:
        now = utc_now()
        profile = self.profile_repository.get_by_client(client_id, business_id)
        events = self.event_repository.list_for_client(client_id, business_id)
        counts = self.event_repository.status_counts_for_client(client_id, business_id)
        return ClientDashboard(
            client_id=client_id,
            cancellation_count=profile.cancellation_count if profile else 0,
            has_cancelled_before=bool(profile and profile.has_cancelled_before),
            catch_up_pre_approved=bool(profile and profile.catch_up_pre_approved),
            catch_up_approval_status=aggregate_status(counts),
            catch_up_credits=self.credit_repository.get_balance(client_id, business_id),
            upcoming_enrollments=self.enrollment_repository.list_upcoming_for_client(client_id, business_id, now),
            open_catch_up_slots=self.session_registry.list_open_catch_up_slots(business_id, client_id, now),
            recent_cancellations=events[:RECENT_CANCELLATIONS_LIMIT],
        )
