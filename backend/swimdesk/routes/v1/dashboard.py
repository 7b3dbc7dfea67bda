"""
Dashboard routes - API v1

    GET /client - The calling client's catch-up snapshot
"""

from fastapi import APIRouter, Depends

from ...api.dependencies.auth import require_client
from ...api.dependencies.services import get_dashboard_service
from ...principal import UserPrincipal
from ...schemas.dashboard import ClientDashboardResponse
from ...services.dashboard_service import DashboardService

router = APIRouter(tags=["dashboard-v1"])


@router.get("/client", response_model=ClientDashboardResponse)
def get_client_dashboard(
    principal: UserPrincipal = Depends(require_client),
    dashboard_service: DashboardService = Depends(get_dashboard_service),
) -> ClientDashboardResponse:
    dashboard = dashboard_service.get_client_dashboard(principal.user_id, principal.business_id)
    return ClientDashboardResponse.model_validate(dashboard)
