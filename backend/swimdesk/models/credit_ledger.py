# backend/swimdesk/models/credit_ledger.py
"""
Catch-up credit ledger.

One row per (client, business) holding an integer balance of unused
catch-up credits. A credit granted by one business can only be spent on
that business's sessions.

The balance only moves through the ledger repository's atomic increment
and conditional decrement, and a check constraint keeps it non-negative
even if a caller bypasses the service layer.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column
import ulid

from swimdesk.database import Base


class CreditLedgerEntry(Base):
    """Unused catch-up credit balance for one client at one business."""

    __tablename__ = "catch_up_credit_ledger"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    client_id: Mapped[str] = mapped_column(String(26), nullable=False, index=True)
    business_id: Mapped[str] = mapped_column(String(26), nullable=False, index=True)

    balance: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_granted: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_consumed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # Bumped on every balance change
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("client_id", "business_id", name="uq_credit_ledger_client_business"),
        CheckConstraint("balance >= 0", name="ck_credit_ledger_balance_non_negative"),
        CheckConstraint(
            "balance = total_granted - total_consumed",
            name="ck_credit_ledger_balance_matches_totals",
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<CreditLedgerEntry(client_id={self.client_id}, business_id={self.business_id}, "
            f"balance={self.balance}, version={self.version})>"
        )
