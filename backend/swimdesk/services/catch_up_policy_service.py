# backend/swimdesk/services/catch_up_policy_service.py
"""
Business catch-up policy and per-client pre-approval.

Businesses without a stored policy use the configured defaults.
"""

from dataclasses import dataclass
import logging
from typing import Optional

from ..core.config import settings
from ..core.enums import CatchUpApprovalStatus
from ..core.exceptions import ClientNotFoundException
from ..models.client_profile import ClientCatchUpProfile
from ..repositories.factory import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EffectivePolicy:
    business_id: str
    catch_up_enabled: bool
    auto_approve: bool
    is_default: bool

    def initial_status(self, client_pre_approved: bool) -> CatchUpApprovalStatus:
        """Approval status a new cancellation event starts in."""
        if not self.catch_up_enabled:
            return CatchUpApprovalStatus.NONE
        if self.auto_approve or client_pre_approved:
            return CatchUpApprovalStatus.APPROVED
        return CatchUpApprovalStatus.PENDING


class CatchUpPolicyService(BaseService):
    def __init__(self, db):
        super().__init__(db)
        self.policy_repository = RepositoryFactory.create_catch_up_policy_repository(db)
        self.profile_repository = RepositoryFactory.create_client_profile_repository(db)
        self.enrollment_repository = RepositoryFactory.create_enrollment_repository(db)

    def get_policy(self, business_id: str) -> EffectivePolicy:
        policy = self.policy_repository.get_by_business(business_id)
        if policy is None:
            return EffectivePolicy(
                business_id=business_id,
                catch_up_enabled=settings.catch_up_enabled_default,
                auto_approve=settings.catch_up_auto_approve_default,
                is_default=True,
            )
        return EffectivePolicy(
            business_id=business_id,
            catch_up_enabled=policy.catch_up_enabled,
            auto_approve=policy.auto_approve,
            is_default=False,
        )

    @BaseService.measure_operation("update_policy")
    def update_policy(
        self,
        business_id: str,
        *,
        catch_up_enabled: bool,
        auto_approve: bool,
        updated_by_id: Optional[str] = None,
    ) -> EffectivePolicy:
        with self.transaction():
            self.policy_repository.upsert(
                business_id,
                catch_up_enabled=catch_up_enabled,
                auto_approve=auto_approve,
                updated_by_id=updated_by_id,
            )
        self.log_operation(
            "update_policy",
            business_id=business_id,
            catch_up_enabled=catch_up_enabled,
            auto_approve=auto_approve,
        )
        return self.get_policy(business_id)

    @BaseService.measure_operation("set_client_pre_approval")
    def set_client_pre_approval(
        self, client_id: str, business_id: str, pre_approved: bool
    ) -> ClientCatchUpProfile:
        """
        Mark a client as approved for every future cancellation at ``business_id``.

        Only affects events recorded afterwards; pending events still need
        a decision.

        Raises:
            ClientNotFoundException: The client never enrolled at ``business_id``
        """
        with self.transaction():
            if not self.enrollment_repository.client_has_history(client_id, business_id):
                raise ClientNotFoundException(client_id)
            profile = self.profile_repository.set_pre_approved(client_id, business_id, pre_approved)
        self.log_operation(
            "set_client_pre_approval", client_id=client_id, business_id=business_id, pre_approved=pre_approved
        )
        return profile
