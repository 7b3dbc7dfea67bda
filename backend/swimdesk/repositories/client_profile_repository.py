# backend/swimdesk/repositories/client_profile_repository.py
"""
Repository for per-client cancellation history and pre-approval.

Every lookup is keyed by (client, business): a client who books with two
businesses has two independent profiles.
"""

from datetime import datetime
import logging
from typing import Optional

from sqlalchemy import case, func, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.client_profile import ClientCatchUpProfile
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class ClientProfileRepository(BaseRepository[ClientCatchUpProfile]):
    def __init__(self, db: Session):
        super().__init__(db, ClientCatchUpProfile)

    def get_by_client(self, client_id: str, business_id: str) -> Optional[ClientCatchUpProfile]:
        return self.find_one_by(client_id=client_id, business_id=business_id)

    def get_or_create(self, client_id: str, business_id: str) -> ClientCatchUpProfile:
        """Return the client's profile at ``business_id``, creating an empty one on first use."""
        profile = self.get_by_client(client_id, business_id)
        if profile is not None:
            return profile
        self._insert_ignore(
            {
                "client_id": client_id,
                "business_id": business_id,
                "cancellation_count": 0,
                "has_cancelled_before": False,
                "catch_up_pre_approved": False,
            },
            ["client_id", "business_id"],
        )
        profile = self.get_by_client(client_id, business_id)
        if profile is None:
            raise RepositoryException(f"Client profile for {client_id} could not be created")
        return profile

    def record_cancellation(self, client_id: str, business_id: str, cancelled_at: datetime) -> ClientCatchUpProfile:
        """Increment the cancellation counter and latch ``has_cancelled_before``."""
        profile = self.get_or_create(client_id, business_id)
        try:
            self.db.execute(
                update(ClientCatchUpProfile)
                .where(ClientCatchUpProfile.id == profile.id)
                .values(
                    cancellation_count=ClientCatchUpProfile.cancellation_count + 1,
                    has_cancelled_before=True,
                    first_cancelled_at=func.coalesce(ClientCatchUpProfile.first_cancelled_at, cancelled_at),
                    last_cancelled_at=case(
                        (ClientCatchUpProfile.last_cancelled_at.is_(None), cancelled_at),
                        (ClientCatchUpProfile.last_cancelled_at < cancelled_at, cancelled_at),
                        else_=ClientCatchUpProfile.last_cancelled_at,
                    ),
                )
                .execution_options(synchronize_session=False)
            )
            self.db.flush()
            self.db.refresh(profile)
            return profile
        except SQLAlchemyError as e:
            self.logger.error(f"Error recording cancellation for client {client_id}: {str(e)}")
            raise RepositoryException(f"Failed to record cancellation: {str(e)}")

    def set_pre_approved(self, client_id: str, business_id: str, pre_approved: bool) -> ClientCatchUpProfile:
        profile = self.get_or_create(client_id, business_id)
        profile.catch_up_pre_approved = pre_approved
        self.db.flush()
        return profile
