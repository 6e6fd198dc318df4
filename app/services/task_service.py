"""Task service"""

from sqlalchemy.orm import Session, joinedload
from datetime import datetime
from typing import Dict, List, Optional
from app.models.task import Task, TASK_STATUSES, STATUS_DONE


def _assigned_query(db: Session, user_id: int):
    return db.query(Task).options(
        joinedload(Task.project),
        joinedload(Task.assignee)
    ).filter(Task.assignee_id == user_id)


def get_assigned_tasks(db: Session, user_id: int) -> List[Task]:
    return _assigned_query(db, user_id).order_by(Task.created_at.desc()).all()


def get_recently_created_tasks(db: Session, user_id: int, since: datetime, limit: int = 10) -> List[Task]:
    return _assigned_query(db, user_id).filter(
        Task.created_at >= since
    ).order_by(Task.created_at.desc()).limit(limit).all()


def get_completed_tasks_since(db: Session, user_id: int, since: datetime) -> List[Task]:
    return _assigned_query(db, user_id).filter(
        Task.status == STATUS_DONE,
        Task.updated_at >= since
    ).all()


def get_tasks_created_between(db: Session, user_id: int, start: datetime, end: datetime) -> List[Task]:
    return _assigned_query(db, user_id).filter(
        Task.created_at >= start,
        Task.created_at <= end
    ).all()


def get_recently_updated_tasks(db: Session, user_id: int, limit: int) -> List[Task]:
    return _assigned_query(db, user_id).order_by(Task.updated_at.desc()).limit(limit).all()


def count_assigned_tasks(db: Session, user_id: int) -> int:
    return db.query(Task).filter(Task.assignee_id == user_id).count()


def is_overdue(due_date: Optional[datetime], finished: bool, now: datetime) -> bool:
    # échéance strictement passée ; une tâche due exactement maintenant n'est pas en retard
    if due_date is None or finished:
        return False
    return due_date < now


def group_by_status(tasks: List[Task]) -> Dict[str, List[Task]]:
    grouped = {status: [] for status in TASK_STATUSES}
    for task in tasks:
        if task.status in grouped:
            grouped[task.status].append(task)
    return grouped
