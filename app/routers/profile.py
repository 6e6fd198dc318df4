import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.deps import get_current_user
from app.models.user import User
from app.schemas.common import to_naive_utc
from app.schemas.dashboard import ReportResponse, ActivityResponse, ExportResponse
from app.services import profile_service

router = APIRouter(prefix="/profile", tags=["profile"])
logger = logging.getLogger(__name__)


@router.get("/export", response_model=ExportResponse)
def export_data(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    try:
        data = profile_service.export_user_data(db, current_user.id)
    except SQLAlchemyError:
        logger.exception("Export failed for user %s", current_user.id)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to export user data")

    return {"success": True, "data": data}


@router.get("/report", response_model=ReportResponse)
def generate_report(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    report_type: str = Query("monthly", alias="reportType"),
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate")
):
    start = to_naive_utc(start_date) if start_date else None
    end = to_naive_utc(end_date) if end_date else None

    try:
        data = profile_service.compute_report(db, current_user.id, report_type, start, end)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except SQLAlchemyError:
        logger.exception("Report failed for user %s", current_user.id)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to generate report")

    return {"success": True, "data": data}


@router.get("/activity", response_model=ActivityResponse)
def activity_log(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0)
):
    try:
        data = profile_service.compute_activity_log(db, current_user.id, limit, offset)
    except SQLAlchemyError:
        logger.exception("Activity log failed for user %s", current_user.id)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to retrieve activity log")

    return {"success": True, "data": data}
