# backend/swimdesk/models/catch_up_policy.py
"""Business-level catch-up policy."""

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column
import ulid

from swimdesk.database import Base


class BusinessCatchUpPolicy(Base):
    """
    Whether a business offers catch-up lessons and whether it decides on
    them manually. Businesses without a row fall back to the configured
    defaults.
    """

    __tablename__ = "business_catch_up_policies"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    business_id: Mapped[str] = mapped_column(String(26), unique=True, nullable=False, index=True)
    catch_up_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    auto_approve: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    updated_by_id: Mapped[Optional[str]] = mapped_column(String(26), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), onupdate=func.now())

    def __repr__(self) -> str:
        return (
            f"<BusinessCatchUpPolicy(business_id={self.business_id}, enabled={self.catch_up_enabled}, "
            f"auto_approve={self.auto_approve})>"
        )
