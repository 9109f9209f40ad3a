from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.permissions import SessionContext
from app.database import get_db
from app.routers.auth_deps import get_session_context
from app.schemas.report import DashboardStats
from app.services.report import ReportService

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("/stats", response_model=DashboardStats)
def get_dashboard_stats(
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(get_session_context),
):
    return ReportService(db).dashboard_stats(ctx)
