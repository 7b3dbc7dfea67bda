# backend/swimdesk/services/credit_ledger_service.py
"""
Credit Ledger Service for SwimDesk

Sole writer of catch-up credit balances. ``credit`` is called on the
pending -> approved transition and ``consume`` by catch-up booking; both
run inside the caller's transaction so the balance change commits with
the state change that caused it.
"""

import logging

from ..core.exceptions import InsufficientCreditException, ValidationException
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.factory import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)


class CreditLedgerService(BaseService):
    def __init__(self, db):
        super().__init__(db)
        self.credit_repository = RepositoryFactory.create_credit_ledger_repository(db)

    @BaseService.measure_operation("credit")
    def credit(
        self, client_id: str, business_id: str, amount: int = 1, *, use_transaction: bool = True
    ) -> int:
        """Grant credits and return the new balance."""
        if amount < 1:
            raise ValidationException("Credit amount must be positive", code="INVALID_AMOUNT")
        with self.optional_transaction(use_transaction):
            balance = self.credit_repository.increment(client_id, business_id, amount)
        prometheus_metrics.record_credit("granted", amount)
        self.logger.info(
            "Catch-up credit granted",
            extra={"client_id": client_id, "amount": amount, "balance": balance},
        )
        return balance

    @BaseService.measure_operation("consume")
    def consume(
        self, client_id: str, business_id: str, amount: int = 1, *, use_transaction: bool = True
    ) -> int:
        """
        Spend credits granted by ``business_id`` and return the new balance.

        Raises:
            InsufficientCreditException: Balance below ``amount``; nothing is spent
        """
        if amount < 1:
            raise ValidationException("Credit amount must be positive", code="INVALID_AMOUNT")
        with self.optional_transaction(use_transaction):
            if not self.credit_repository.try_decrement(client_id, business_id, amount):
                balance = self.credit_repository.get_balance(client_id, business_id)
                self.logger.warning(
                    "Catch-up credit consumption refused",
                    extra={
                        "client_id": client_id,
                        "business_id": business_id,
                        "balance": balance,
                        "requested": amount,
                    },
                )
                raise InsufficientCreditException(client_id, balance, amount)
            balance = self.credit_repository.get_balance(client_id, business_id)
        prometheus_metrics.record_credit("consumed", amount)
        self.logger.info(
            "Catch-up credit consumed",
            extra={"client_id": client_id, "amount": amount, "balance": balance},
        )
        return balance

    def get_balance(self, client_id: str, business_id: str) -> int:
        return self.credit_repository.get_balance(client_id, business_id)
