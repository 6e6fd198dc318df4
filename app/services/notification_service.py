"""
Notification emitter.

Turns domain events (task assigned, status changed, new discussion message) into
Notification rows. Emission runs after the triggering write is committed and is
best-effort: a failure is logged and rolled back, never raised to the caller.
"""

import logging
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from typing import Iterable, List, Optional

from app.models.notification import Notification
from app.models.task import Task
from app.models.message import Message
from app.services.project_service import get_member_ids

logger = logging.getLogger(__name__)

PREVIEW_LENGTH = 50


def preview(content: str, length: int = PREVIEW_LENGTH) -> str:
    if len(content) > length:
        return content[:length] + "..."
    return content


def _discard(db: Session, event: str) -> int:
    # l'écriture principale est déjà commitée : on annule seulement l'émission
    db.rollback()
    logger.warning("Could not emit %s notification", event, exc_info=True)
    return 0


def notify_users(db: Session, user_ids: Iterable[int], content: str) -> int:
    """Insert one notification per distinct recipient. Returns how many were created."""
    recipients = list(dict.fromkeys(uid for uid in user_ids if uid is not None))
    if not recipients:
        return 0

    try:
        db.add_all([Notification(user_id=uid, content=content) for uid in recipients])
        db.commit()
    except SQLAlchemyError:
        return _discard(db, repr(content))

    return len(recipients)


def notify_task_created(db: Session, task: Task) -> int:
    try:
        if not task.assignee_id:
            return 0
        content = f'You have been assigned a new task: "{task.title}" in project "{task.project.name}"'
        return notify_users(db, [task.assignee_id], content)
    except SQLAlchemyError:
        return _discard(db, "task created")


def notify_status_changed(db: Session, task: Task) -> int:
    try:
        content = f'Task "{task.title}" status changed to "{task.status}"'

        recipients: List[int] = []
        if task.assignee_id:
            recipients.append(task.assignee_id)
        recipients.extend(uid for uid in get_member_ids(db, task.project_id) if uid != task.assignee_id)

        return notify_users(db, recipients, content)
    except SQLAlchemyError:
        return _discard(db, "status changed")


def notify_task_updated(db: Session, task: Task, previous_assignee_id: Optional[int], previous_status: str) -> int:
    created = 0

    try:
        if task.assignee_id and task.assignee_id != previous_assignee_id:
            created += notify_users(db, [task.assignee_id], f'You have been assigned a task: "{task.title}"')

        if task.status != previous_status:
            created += notify_status_changed(db, task)
    except SQLAlchemyError:
        return created + _discard(db, "task updated")

    return created


def notify_new_message(db: Session, message: Message) -> int:
    try:
        content = f'New message in project discussion: "{preview(message.content)}"'
        recipients = [uid for uid in get_member_ids(db, message.project_id) if uid != message.user_id]
        return notify_users(db, recipients, content)
    except SQLAlchemyError:
        return _discard(db, "new message")


# ============ COMPTEURS ============

def unread_total(db: Session, user_id: int) -> int:
    """Unread notifications across everything the user has ever received."""
    return db.query(Notification).filter(
        Notification.user_id == user_id,
        Notification.read == False
    ).count()


def unread_among_recent(notifications: List[Notification]) -> int:
    """Unread count limited to an already-fetched window (the dashboard's last 10)."""
    return sum(1 for n in notifications if not n.read)


def get_recent_notifications(db: Session, user_id: int, limit: int = 10, offset: int = 0) -> List[Notification]:
    return db.query(Notification).filter(
        Notification.user_id == user_id
    ).order_by(Notification.created_at.desc(), Notification.id.desc()).offset(offset).limit(limit).all()
