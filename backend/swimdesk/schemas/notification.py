"""Outbox dispatch schema."""

from typing import List

from ._strict_base import ORMResponseModel


class DispatchSummaryResponse(ORMResponseModel):
    sent: List[str]
    retried: List[str]
    failed: List[str]
