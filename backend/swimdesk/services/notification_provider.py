# backend/swimdesk/services/notification_provider.py
"""
Notification provider used by the outbox dispatcher.

Delivery mechanics (email, SMS, push) belong to the messaging service;
this provider records the hand-off in the application log. Tests can
simulate transient provider outages with ``raise_on``.
"""

from __future__ import annotations

from dataclasses import dataclass
import json
import logging
from typing import Any, Dict, Iterable, Optional

logger = logging.getLogger(__name__)


class NotificationProviderTemporaryError(RuntimeError):
    """Transient provider failure; the dispatcher retries with backoff."""


@dataclass(slots=True)
class NotificationDispatchResult:
    """Metadata describing a provider send."""

    idempotency_key: str
    event_type: str
    recipient_id: str


class NotificationProvider:
    """
    Usage:
        provider = NotificationProvider()
        provider.send(event_type="catch_up.approved", recipient_id=client_id, payload={...}, idempotency_key="...")
    """

    def __init__(self, raise_on: Optional[Iterable[str]] = None) -> None:
        self._raise_on = {token for token in (raise_on or ()) if token}

    def _should_raise(self, event_type: str, idempotency_key: str) -> bool:
        tokens = self._raise_on
        return "*" in tokens or event_type in tokens or idempotency_key in tokens

    def send(
        self,
        event_type: str,
        recipient_id: str,
        payload: Optional[Dict[str, Any]] = None,
        idempotency_key: Optional[str] = None,
    ) -> NotificationDispatchResult:
        if not idempotency_key:
            raise ValueError("idempotency_key is required for notification dispatch")

        if self._should_raise(event_type, idempotency_key):
            logger.warning("Simulating provider failure for %s (%s)", event_type, idempotency_key)
            raise NotificationProviderTemporaryError(f"Simulated transient failure for {event_type}")

        logger.info(
            "Dispatching notification %s to %s key=%s payload=%s",
            event_type,
            recipient_id,
            idempotency_key,
            json.dumps(payload or {}, sort_keys=True, default=str)[:500],
        )
        return NotificationDispatchResult(
            idempotency_key=idempotency_key,
            event_type=event_type,
            recipient_id=recipient_id,
        )
