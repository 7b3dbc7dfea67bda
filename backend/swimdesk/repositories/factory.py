# backend/swimdesk/repositories/factory.py
"""
Repository Factory for SwimDesk

Provides centralized creation of repository instances,
ensuring consistent initialization and dependency injection.
"""

from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from .base_repository import BaseRepository

# Avoid circular imports
if TYPE_CHECKING:
    from .cancellation_event_repository import CancellationEventRepository
    from .catch_up_policy_repository import CatchUpPolicyRepository
    from .client_profile_repository import ClientProfileRepository
    from .credit_ledger_repository import CreditLedgerRepository
    from .enrollment_repository import EnrollmentRepository
    from .event_outbox_repository import EventOutboxRepository
    from .session_repository import SessionRepository


class RepositoryFactory:
    """
    Factory class for creating repository instances.

    Centralizes repository creation to ensure consistent initialization
    and makes it easy to swap implementations in tests.
    """

    @staticmethod
    def create_base_repository(db: Session, model) -> BaseRepository:
        """Create a generic base repository for any model."""
        return BaseRepository(db, model)

    @staticmethod
    def create_session_repository(db: Session) -> "SessionRepository":
        """Create repository for class sessions."""
        from .session_repository import SessionRepository

        return SessionRepository(db)

    @staticmethod
    def create_enrollment_repository(db: Session) -> "EnrollmentRepository":
        """Create repository for enrollments."""
        from .enrollment_repository import EnrollmentRepository

        return EnrollmentRepository(db)

    @staticmethod
    def create_cancellation_event_repository(db: Session) -> "CancellationEventRepository":
        """Create repository for cancellation events."""
        from .cancellation_event_repository import CancellationEventRepository

        return CancellationEventRepository(db)

    @staticmethod
    def create_client_profile_repository(db: Session) -> "ClientProfileRepository":
        """Create repository for client cancellation history."""
        from .client_profile_repository import ClientProfileRepository

        return ClientProfileRepository(db)

    @staticmethod
    def create_credit_ledger_repository(db: Session) -> "CreditLedgerRepository":
        """Create repository for catch-up credit balances."""
        from .credit_ledger_repository import CreditLedgerRepository

        return CreditLedgerRepository(db)

    @staticmethod
    def create_catch_up_policy_repository(db: Session) -> "CatchUpPolicyRepository":
        """Create repository for business catch-up policies."""
        from .catch_up_policy_repository import CatchUpPolicyRepository

        return CatchUpPolicyRepository(db)

    @staticmethod
    def create_event_outbox_repository(db: Session) -> "EventOutboxRepository":
        """Create repository for the notification outbox."""
        from .event_outbox_repository import EventOutboxRepository

        return EventOutboxRepository(db)
