from datetime import datetime
from typing import List

from app.schemas.common import CamelModel


class NotificationResponse(CamelModel):
    id: int
    user_id: int
    content: str
    read: bool
    created_at: datetime


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    pages: int


class NotificationListResponse(CamelModel):
    success: bool = True
    notifications: List[NotificationResponse]
    pagination: Pagination
    # calculé sur toutes les notifications, pas seulement la page
    unread_count: int
