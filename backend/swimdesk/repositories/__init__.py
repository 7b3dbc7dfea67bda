"""
Repository Pattern Implementation for SwimDesk

This package provides the repository layer for data access,
separating business logic from database queries.

Key Components:
- BaseRepository: Foundation for all repositories with common read/create/update operations
- RepositoryFactory: Factory for creating repository instances
- SessionRepository: Class sessions and slot aggregates
- EnrollmentRepository: Enrollments with conditional cancel
- CancellationEventRepository: Catch-up requests with compare-and-set status changes
- CreditLedgerRepository: Credit balances with atomic increment and conditional decrement

Usage:
    from swimdesk.repositories import RepositoryFactory

    # In a service:
    repository = RepositoryFactory.create_credit_ledger_repository(db)
    balance = repository.get_balance(client_id, business_id)
"""

from .base_repository import BaseRepository
from .cancellation_event_repository import CancellationEventRepository, PendingClientSummary
from .catch_up_policy_repository import CatchUpPolicyRepository
from .client_profile_repository import ClientProfileRepository
from .credit_ledger_repository import CreditLedgerRepository
from .enrollment_repository import EnrollmentRepository
from .event_outbox_repository import EventOutboxRepository
from .factory import RepositoryFactory
from .session_repository import SessionRepository

__all__ = [
    "BaseRepository",
    "CancellationEventRepository",
    "CatchUpPolicyRepository",
    "ClientProfileRepository",
    "CreditLedgerRepository",
    "EnrollmentRepository",
    "EventOutboxRepository",
    "PendingClientSummary",
    "RepositoryFactory",
    "SessionRepository",
]
