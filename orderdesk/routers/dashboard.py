# orderdesk/routers/dashboard.py
from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from orderdesk.core.auth import require_capability
from orderdesk.core.permissions import Capability
from orderdesk.database import get_session
from orderdesk.repositories.dashboard_repo import DashboardRepository
from orderdesk.schemas.dashboard import DashboardMetrics
from orderdesk.services.dashboard_service import DashboardService

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])

repo = DashboardRepository()
service = DashboardService(repo)


@router.get(
    "/metrics",
    response_model=DashboardMetrics,
    dependencies=[Depends(require_capability(Capability.VIEW_DASHBOARD))],
)
def get_dashboard_metrics(
    top_n: int = Query(5, ge=1, le=50),
    latest_n: int = Query(5, ge=1, le=50),
    session: Session = Depends(get_session),
):
    """
    Aggregated metrics for the dashboard.

    - KPIs cover today, the last 7 and the last 30 business days.
    - `nulo` orders are left out of sales figures.

    Only accessible to admin and facturador.
    """
    return service.get_metrics(session, top_n=top_n, latest_n=latest_n)
