# backend/swimdesk/repositories/catch_up_policy_repository.py
"""Repository for business catch-up policies."""

from typing import Optional

from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.catch_up_policy import BusinessCatchUpPolicy
from .base_repository import BaseRepository


class CatchUpPolicyRepository(BaseRepository[BusinessCatchUpPolicy]):
    def __init__(self, db: Session):
        super().__init__(db, BusinessCatchUpPolicy)

    def get_by_business(self, business_id: str) -> Optional[BusinessCatchUpPolicy]:
        return self.find_one_by(business_id=business_id)

    def upsert(
        self,
        business_id: str,
        *,
        catch_up_enabled: bool,
        auto_approve: bool,
        updated_by_id: Optional[str] = None,
    ) -> BusinessCatchUpPolicy:
        policy = self.get_by_business(business_id)
        if policy is None:
            self._insert_ignore(
                {
                    "business_id": business_id,
                    "catch_up_enabled": catch_up_enabled,
                    "auto_approve": auto_approve,
                    "updated_by_id": updated_by_id,
                },
                ["business_id"],
            )
            policy = self.get_by_business(business_id)
            if policy is None:
                raise RepositoryException(f"Catch-up policy for {business_id} could not be created")
        policy.catch_up_enabled = catch_up_enabled
        policy.auto_approve = auto_approve
        policy.updated_by_id = updated_by_id
        self.db.flush()
        return policy
