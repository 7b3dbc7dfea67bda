"""
Notification outbox routes - API v1

    POST /dispatch - Deliver due outbox messages now (admin)
"""

import logging

from fastapi import APIRouter, Depends

from ...api.dependencies.auth import require_admin
from ...api.dependencies.services import get_notification_dispatcher
from ...principal import UserPrincipal
from ...schemas.notification import DispatchSummaryResponse
from ...services.notification_dispatcher import NotificationDispatcher

logger = logging.getLogger(__name__)

router = APIRouter(tags=["notifications-v1"])


@router.post("/dispatch", response_model=DispatchSummaryResponse)
def dispatch_notifications(
    principal: UserPrincipal = Depends(require_admin),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
) -> DispatchSummaryResponse:
    logger.info("Manual outbox dispatch requested by %s", principal.user_id)
    return DispatchSummaryResponse.model_validate(dispatcher.dispatch_pending())
