"""
Aggregation service for the dashboard.

Everything here is read-only: rows are fetched once, then the rollups, the
per-project distribution and the weekly series are computed in memory.
`now` can be injected so that overdue and week buckets are deterministic.
"""

from collections import Counter
from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy.orm import Session

from app.models.personal_todo import PersonalTodo
from app.models.task import Task, STATUS_TODO, STATUS_IN_PROGRESS, STATUS_DONE
from app.schemas.dashboard import (
    DashboardData,
    DashboardStats,
    DayProgress,
    NotificationStats,
    ProductivityInsights,
    ProjectStats,
    ProjectTaskDistribution,
    TaskStats,
    TodoStats,
)
from app.schemas.notification import NotificationResponse
from app.schemas.personal_todo import PersonalTodoResponse
from app.schemas.project import ProjectOverview
from app.schemas.task import TaskResponse
from app.services import task_service, project_service, notification_service

RECENT_NOTIFICATIONS = 10
RECENT_ACTIVITY_DAYS = 7
INSIGHTS_WINDOW_DAYS = 30
# 20 tâches terminées sur 30 jours = score de 100
SCORE_TARGET = 20

DAY_LABELS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
WEEKDAY_NAMES = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


# ============ ROLLUPS ============

def task_stats(tasks: List[Task], now: datetime) -> TaskStats:
    return TaskStats(
        total=len(tasks),
        todo=sum(1 for t in tasks if t.status == STATUS_TODO),
        in_progress=sum(1 for t in tasks if t.status == STATUS_IN_PROGRESS),
        completed=sum(1 for t in tasks if t.status == STATUS_DONE),
        overdue=sum(1 for t in tasks if task_service.is_overdue(t.due_date, t.status == STATUS_DONE, now)),
    )


def todo_stats(todos: List[PersonalTodo], now: datetime) -> TodoStats:
    return TodoStats(
        total=len(todos),
        pending=sum(1 for t in todos if not t.completed),
        completed=sum(1 for t in todos if t.completed),
        overdue=sum(1 for t in todos if task_service.is_overdue(t.due_date, t.completed, now)),
    )


def task_distribution(projects, tasks: List[Task]) -> List[ProjectTaskDistribution]:
    distribution = []
    for project in projects:
        own = [t for t in tasks if t.project_id == project.id]
        distribution.append(ProjectTaskDistribution(
            project_id=project.id,
            project_name=project.name,
            task_count=project.task_count,
            completed_tasks=sum(1 for t in own if t.status == STATUS_DONE),
            in_progress_tasks=sum(1 for t in own if t.status == STATUS_IN_PROGRESS),
            todo_tasks=sum(1 for t in own if t.status == STATUS_TODO),
        ))
    return distribution


def week_start(now: datetime):
    today = now.date()
    return today - timedelta(days=today.weekday())


def weekly_progress(tasks: List[Task], now: datetime) -> List[DayProgress]:
    """Seven buckets, Monday to Sunday of the current week, always present."""
    monday = week_start(now)
    series = []
    for offset, label in enumerate(DAY_LABELS):
        day = monday + timedelta(days=offset)
        completed = sum(
            1 for t in tasks
            if t.status == STATUS_DONE and t.updated_at is not None and t.updated_at.date() == day
        )
        created = sum(1 for t in tasks if t.created_at is not None and t.created_at.date() == day)
        series.append(DayProgress(day=label, date=day.isoformat(), completed=completed, created=created))
    return series


# ============ COMPLETION ANALYTICS ============

def average_completion_days(done_tasks: List[Task]) -> Optional[float]:
    """Mean time from creation to last update (= completion) of Done tasks, in days."""
    durations = [
        (t.updated_at - t.created_at).total_seconds()
        for t in done_tasks
        if t.updated_at is not None and t.created_at is not None
    ]
    if not durations:
        return None
    return round(sum(durations) / len(durations) / 86400, 1)


def most_productive_day(done_tasks: List[Task]) -> Optional[str]:
    counts = Counter(t.updated_at.weekday() for t in done_tasks if t.updated_at is not None)
    if not counts:
        return None
    # égalité -> le jour le plus tôt dans la semaine
    best = max(counts, key=lambda weekday: (counts[weekday], -weekday))
    return WEEKDAY_NAMES[best]


def top_projects(tasks: List[Task]) -> dict:
    counts = {}
    for task in tasks:
        name = task.project.name
        counts[name] = counts.get(name, 0) + 1
    return counts


def productivity_score(completed_count: int) -> int:
    return min(100, completed_count * 100 // SCORE_TARGET)


# ============ OPERATIONS ============

def get_personal_todos(db: Session, user_id: int) -> List[PersonalTodo]:
    return db.query(PersonalTodo).filter(
        PersonalTodo.user_id == user_id
    ).order_by(PersonalTodo.created_at.desc()).all()


def compute_dashboard(db: Session, user_id: int, now: datetime = None) -> DashboardData:
    if now is None:
        now = datetime.utcnow()

    projects = project_service.get_user_projects(db, user_id)
    tasks = task_service.get_assigned_tasks(db, user_id)
    todos = get_personal_todos(db, user_id)
    notifications = notification_service.get_recent_notifications(db, user_id, RECENT_NOTIFICATIONS)
    recent_tasks = task_service.get_recently_created_tasks(
        db, user_id, now - timedelta(days=RECENT_ACTIVITY_DAYS)
    )

    stats = DashboardStats(
        projects=ProjectStats(
            total=len(projects),
            active=len(projects),
            total_tasks=sum(p.task_count for p in projects),
            total_members=sum(p.member_count for p in projects),
        ),
        tasks=task_stats(tasks, now),
        personal_todos=todo_stats(todos, now),
        notifications=NotificationStats(
            total=len(notifications),
            unread_among_recent=notification_service.unread_among_recent(notifications),
        ),
    )

    return DashboardData(
        stats=stats,
        task_distribution=task_distribution(projects, tasks),
        recent_activity=[TaskResponse.model_validate(t) for t in recent_tasks],
        weekly_progress=weekly_progress(tasks, now),
        projects=[ProjectOverview.model_validate(p) for p in projects],
        tasks=[TaskResponse.model_validate(t) for t in tasks],
        personal_todos=[PersonalTodoResponse.model_validate(t) for t in todos],
        notifications=[NotificationResponse.model_validate(n) for n in notifications],
    )


def compute_productivity_insights(db: Session, user_id: int, now: datetime = None) -> ProductivityInsights:
    if now is None:
        now = datetime.utcnow()

    done = task_service.get_completed_tasks_since(db, user_id, now - timedelta(days=INSIGHTS_WINDOW_DAYS))

    return ProductivityInsights(
        tasks_completed_this_month=len(done),
        average_completion_time=average_completion_days(done),
        most_productive_day=most_productive_day(done),
        top_project=top_projects(done),
        productivity_score=productivity_score(len(done)),
    )
