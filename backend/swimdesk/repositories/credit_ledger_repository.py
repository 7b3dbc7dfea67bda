# backend/swimdesk/repositories/credit_ledger_repository.py
"""
Credit Ledger Repository for SwimDesk

Balances are never read-modify-written in Python. Grants are a single
atomic increment; consumption is a conditional decrement that matches
only when enough balance remains, so the balance can never go negative
under concurrent requests.

Balances are kept per (client, business); a credit only unlocks catch-up
slots at the business that granted it.
"""

import logging
from typing import Optional

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.credit_ledger import CreditLedgerEntry
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class CreditLedgerRepository(BaseRepository[CreditLedgerEntry]):
    """Repository for catch-up credit balances."""

    def __init__(self, db: Session):
        super().__init__(db, CreditLedgerEntry)

    def get_by_client(self, client_id: str, business_id: str) -> Optional[CreditLedgerEntry]:
        return self.find_one_by(client_id=client_id, business_id=business_id)

    def get_balance(self, client_id: str, business_id: str) -> int:
        """Current balance; clients without a ledger row hold zero."""
        entry = self.get_by_client(client_id, business_id)
        return int(entry.balance) if entry is not None else 0

    def get_or_create(self, client_id: str, business_id: str) -> CreditLedgerEntry:
        entry = self.get_by_client(client_id, business_id)
        if entry is not None:
            return entry
        self._insert_ignore(
            {
                "client_id": client_id,
                "business_id": business_id,
                "balance": 0,
                "total_granted": 0,
                "total_consumed": 0,
                "version": 0,
            },
            ["client_id", "business_id"],
        )
        entry = self.get_by_client(client_id, business_id)
        if entry is None:
            raise RepositoryException(f"Credit ledger for {client_id} could not be created")
        return entry

    def increment(self, client_id: str, business_id: str, amount: int = 1) -> int:
        """Grant ``amount`` credits and return the new balance."""
        entry = self.get_or_create(client_id, business_id)
        try:
            self.db.execute(
                update(CreditLedgerEntry)
                .where(CreditLedgerEntry.id == entry.id)
                .values(
                    balance=CreditLedgerEntry.balance + amount,
                    total_granted=CreditLedgerEntry.total_granted + amount,
                    version=CreditLedgerEntry.version + 1,
                )
                .execution_options(synchronize_session=False)
            )
            self.db.flush()
            self.db.refresh(entry)
            return int(entry.balance)
        except SQLAlchemyError as e:
            self.logger.error(f"Error granting credit to client {client_id}: {str(e)}")
            raise RepositoryException(f"Failed to grant credit: {str(e)}")

    def try_decrement(self, client_id: str, business_id: str, amount: int = 1) -> bool:
        """
        Consume ``amount`` credits if at least that many remain.

        Returns:
            True if the credits were consumed, False if the balance was too low.
        """
        try:
            result = self.db.execute(
                update(CreditLedgerEntry)
                .where(
                    CreditLedgerEntry.client_id == client_id,
                    CreditLedgerEntry.business_id == business_id,
                    CreditLedgerEntry.balance >= amount,
                )
                .values(
                    balance=CreditLedgerEntry.balance - amount,
                    total_consumed=CreditLedgerEntry.total_consumed + amount,
                    version=CreditLedgerEntry.version + 1,
                )
                .execution_options(synchronize_session=False)
            )
            self.db.flush()
            consumed = bool(result.rowcount)
            if consumed:
                entry = self.get_by_client(client_id, business_id)
                if entry is not None:
                    self.db.refresh(entry)
            return consumed
        except SQLAlchemyError as e:
            self.logger.error(f"Error consuming credit for client {client_id}: {str(e)}")
            raise RepositoryException(f"Failed to consume credit: {str(e)}")
