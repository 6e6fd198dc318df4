import math

from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.deps import get_current_user
from app.models.user import User
from app.models.notification import Notification
from app.schemas.common import StatusResponse
from app.schemas.notification import NotificationListResponse
from app.services.notification_service import unread_total

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=NotificationListResponse)
def list_notifications(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    unread_only: bool = Query(False, alias="unreadOnly")
):
    query = db.query(Notification).filter(Notification.user_id == current_user.id)
    if unread_only:
        query = query.filter(Notification.read == False)

    total = query.count()
    notifications = query.order_by(
        Notification.created_at.desc(), Notification.id.desc()
    ).offset((page - 1) * limit).limit(limit).all()

    return {
        "success": True,
        "notifications": notifications,
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "pages": math.ceil(total / limit),
        },
        "unread_count": unread_total(db, current_user.id),
    }


@router.put("/mark-all-read", response_model=StatusResponse)
def mark_all_as_read(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    db.query(Notification).filter(
        Notification.user_id == current_user.id,
        Notification.read == False
    ).update({Notification.read: True}, synchronize_session=False)
    db.commit()
    return {"success": True, "message": "All notifications marked as read"}


@router.put("/{notification_id}/read", response_model=StatusResponse)
def mark_as_read(
    notification_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    updated = db.query(Notification).filter(
        Notification.id == notification_id,
        Notification.user_id == current_user.id
    ).update({Notification.read: True}, synchronize_session=False)

    if not updated:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found")

    db.commit()
    return {"success": True, "message": "Notification marked as read"}


@router.delete("/clear-all", response_model=StatusResponse)
def clear_all(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    db.query(Notification).filter(Notification.user_id == current_user.id).delete(synchronize_session=False)
    db.commit()
    return {"success": True, "message": "All notifications cleared"}


@router.delete("/{notification_id}", response_model=StatusResponse)
def delete_notification(
    notification_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    deleted = db.query(Notification).filter(
        Notification.id == notification_id,
        Notification.user_id == current_user.id
    ).delete(synchronize_session=False)

    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found")

    db.commit()
    return {"success": True, "message": "Notification deleted successfully"}
