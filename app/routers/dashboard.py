"""
Router du tableau de bord (stats agrégées + insights de productivité).

Endpoints:
- GET /dashboard/stats - rollups, distribution par projet, progression hebdo
- GET /dashboard/insights - tâches terminées sur 30 jours, score
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.deps import get_current_user
from app.models.user import User
from app.schemas.dashboard import DashboardResponse, InsightsResponse
from app.services import dashboard_service

router = APIRouter(prefix="/dashboard", tags=["dashboard"])
logger = logging.getLogger(__name__)


@router.get("/stats", response_model=DashboardResponse)
def dashboard_stats(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    try:
        data = dashboard_service.compute_dashboard(db, current_user.id)
    except SQLAlchemyError:
        logger.exception("Dashboard stats failed for user %s", current_user.id)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to load dashboard statistics")

    return {"success": True, "data": data}


@router.get("/insights", response_model=InsightsResponse)
def productivity_insights(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    try:
        insights = dashboard_service.compute_productivity_insights(db, current_user.id)
    except SQLAlchemyError:
        logger.exception("Productivity insights failed for user %s", current_user.id)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to load productivity insights")

    return {"success": True, "insights": insights}
