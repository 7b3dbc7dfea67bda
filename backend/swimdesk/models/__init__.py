# backend/swimdesk/models/__init__.py
"""
Models package for SwimDesk.

Importing this package registers every table on ``Base.metadata``.
"""

from .cancellation_event import CancellationEvent
from .catch_up_policy import BusinessCatchUpPolicy
from .class_session import ClassSession
from .client_profile import ClientCatchUpProfile
from .credit_ledger import CreditLedgerEntry
from .enrollment import Enrollment
from .event_outbox import EventOutbox, EventOutboxStatus

__all__ = [
    "BusinessCatchUpPolicy",
    "CancellationEvent",
    "ClassSession",
    "ClientCatchUpProfile",
    "CreditLedgerEntry",
    "Enrollment",
    "EventOutbox",
    "EventOutboxStatus",
]
