# backend/swimdesk/models/client_profile.py
"""
Per-client catch-up bookkeeping, kept separately for each business the
client books with.

``cancellation_count`` is append-only and ``has_cancelled_before`` latches
to true on the first cancellation; neither is ever reset by approval
outcomes.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, CheckConstraint, DateTime, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column
import ulid

from swimdesk.database import Base


class ClientCatchUpProfile(Base):
    """Cancellation history counters and pre-approval flag for one client at one business."""

    __tablename__ = "client_catch_up_profiles"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    client_id: Mapped[str] = mapped_column(String(26), nullable=False, index=True)
    business_id: Mapped[str] = mapped_column(String(26), nullable=False, index=True)

    cancellation_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    has_cancelled_before: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    # Business marked this client as approved for every future cancellation
    catch_up_pre_approved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    first_cancelled_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    last_cancelled_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("client_id", "business_id", name="uq_client_profiles_client_business"),
        CheckConstraint("cancellation_count >= 0", name="ck_client_profiles_count_non_negative"),
    )

    def __repr__(self) -> str:
        return (
            f"<ClientCatchUpProfile(client_id={self.client_id}, count={self.cancellation_count}, "
            f"pre_approved={self.catch_up_pre_approved})>"
        )
