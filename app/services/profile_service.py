"""Profile service: productivity report, activity log, data export"""

from datetime import datetime, timedelta
from typing import List, Optional, Tuple

from dateutil.relativedelta import relativedelta
from sqlalchemy.orm import Session

from app.models.user import User
from app.models.personal_todo import PersonalTodo, PRIORITIES
from app.models.project import Project
from app.models.project_member import ProjectMember
from app.models.notification import Notification
from app.models.task import Task, STATUS_DONE, STATUS_IN_PROGRESS
from app.schemas.dashboard import (
    ActivityEntry,
    ActivityLog,
    ExportData,
    ExportedMembership,
    ExportProjects,
    ReportData,
    ReportPeriod,
    ReportProductivity,
    ReportStatistics,
    ReportTask,
    ReportTodo,
    ReportTodoStats,
    ReportUser,
)
from app.schemas.notification import NotificationResponse
from app.schemas.personal_todo import PersonalTodoResponse
from app.schemas.project import ProjectOverview
from app.schemas.task import TaskResponse
from app.services import dashboard_service, notification_service, task_service


# ============ PÉRIODE DU RAPPORT ============

def resolve_report_window(
    report_type: str,
    start_date: Optional[datetime],
    end_date: Optional[datetime],
    now: datetime
) -> Tuple[datetime, datetime, str]:
    """
    weekly / monthly / yearly are trailing windows ending now.
    Any other type uses the explicit start/end when both are given,
    and falls back to monthly otherwise.
    """
    if report_type == "weekly":
        return now - timedelta(days=7), now, "weekly"
    if report_type == "monthly":
        return now - relativedelta(months=1), now, "monthly"
    if report_type == "yearly":
        return now - relativedelta(years=1), now, "yearly"
    if start_date and end_date:
        if start_date > end_date:
            raise ValueError("startDate must be before endDate")
        return start_date, end_date, "custom"
    return now - relativedelta(months=1), now, "monthly"


# ============ RAPPORT ============

def compute_report(
    db: Session,
    user_id: int,
    report_type: str = "monthly",
    start_date: datetime = None,
    end_date: datetime = None,
    now: datetime = None
) -> ReportData:
    if now is None:
        now = datetime.utcnow()

    user = db.get(User, user_id)
    if user is None:
        raise LookupError("User not found")

    start, end, resolved_type = resolve_report_window(report_type, start_date, end_date, now)

    tasks = task_service.get_tasks_created_between(db, user_id, start, end)
    todos = db.query(PersonalTodo).filter(
        PersonalTodo.user_id == user_id,
        PersonalTodo.created_at >= start,
        PersonalTodo.created_at <= end
    ).all()

    done = [t for t in tasks if t.status == STATUS_DONE]
    base_todo_stats = dashboard_service.todo_stats(todos, now)

    statistics = ReportStatistics(
        period=ReportPeriod(start=start, end=end, type=resolved_type),
        tasks=dashboard_service.task_stats(tasks, now),
        personal_todos=ReportTodoStats(
            **base_todo_stats.model_dump(),
            by_priority={p: sum(1 for t in todos if t.priority == p) for p in PRIORITIES},
        ),
        productivity=ReportProductivity(
            completion_rate=round(len(done) / len(tasks) * 100) if tasks else 0,
            average_completion_time=dashboard_service.average_completion_days(done),
            most_productive_day=dashboard_service.most_productive_day(done),
            top_project=dashboard_service.top_projects(tasks),
        ),
    )

    return ReportData(
        user=ReportUser.model_validate(user),
        statistics=statistics,
        tasks=[
            ReportTask(
                title=t.title,
                status=t.status,
                project=t.project.name,
                created_at=t.created_at,
                updated_at=t.updated_at,
                due_date=t.due_date,
            )
            for t in tasks
        ],
        personal_todos=[ReportTodo.model_validate(t) for t in todos],
        generated_at=now,
    )


# ============ JOURNAL D'ACTIVITÉ ============

def task_action(status: str) -> str:
    if status == STATUS_DONE:
        return "completed"
    if status == STATUS_IN_PROGRESS:
        return "started"
    return "created"


def _task_entry(task: Task) -> ActivityEntry:
    return ActivityEntry(
        id=f"task-{task.id}",
        type="task",
        action=task_action(task.status),
        title=task.title,
        project=task.project.name,
        status=task.status,
        timestamp=task.updated_at,
    )


def _todo_entry(todo: PersonalTodo) -> ActivityEntry:
    return ActivityEntry(
        id=f"todo-{todo.id}",
        type="todo",
        action="completed" if todo.completed else "created",
        title=todo.title,
        status="completed" if todo.completed else "pending",
        timestamp=todo.updated_at,
    )


def _notification_entry(notification: Notification) -> ActivityEntry:
    return ActivityEntry(
        id=f"notification-{notification.id}",
        type="notification",
        action="received",
        title=notification.content,
        status="read" if notification.read else "unread",
        timestamp=notification.created_at,
    )


def compute_activity_log(db: Session, user_id: int, limit: int = 50, offset: int = 0) -> ActivityLog:
    """
    Merged feed of tasks, todos and notifications, newest first.

    Each source contributes its `offset + limit + 1` most recent rows, so slicing
    the merged list at [offset:offset + limit] gives the same page a single
    global cursor would, and anything left past the slice means there is more.
    """
    window = offset + limit
    # une ligne de plus par source pour savoir s'il reste des entrées
    fetch = window + 1

    tasks = task_service.get_recently_updated_tasks(db, user_id, fetch)
    todos = db.query(PersonalTodo).filter(
        PersonalTodo.user_id == user_id
    ).order_by(PersonalTodo.updated_at.desc()).limit(fetch).all()
    notifications = notification_service.get_recent_notifications(db, user_id, fetch)

    merged: List[ActivityEntry] = (
        [_task_entry(t) for t in tasks]
        + [_todo_entry(t) for t in todos]
        + [_notification_entry(n) for n in notifications]
    )
    merged.sort(key=lambda entry: entry.timestamp, reverse=True)

    total = (
        task_service.count_assigned_tasks(db, user_id)
        + db.query(PersonalTodo).filter(PersonalTodo.user_id == user_id).count()
        + db.query(Notification).filter(Notification.user_id == user_id).count()
    )

    return ActivityLog(
        activities=merged[offset:window],
        total=total,
        has_more=len(merged) > window,
    )


# ============ EXPORT ============

def export_user_data(db: Session, user_id: int, now: datetime = None) -> ExportData:
    if now is None:
        now = datetime.utcnow()

    user = db.get(User, user_id)
    if user is None:
        raise LookupError("User not found")

    created = db.query(Project).filter(Project.created_by == user_id).order_by(Project.created_at.desc()).all()
    memberships = db.query(ProjectMember).filter(ProjectMember.user_id == user_id).all()
    tasks = task_service.get_assigned_tasks(db, user_id)
    todos = dashboard_service.get_personal_todos(db, user_id)
    notifications = db.query(Notification).filter(
        Notification.user_id == user_id
    ).order_by(Notification.created_at.desc()).all()

    project_ids = {p.id for p in created} | {m.project_id for m in memberships}

    return ExportData(
        user=ReportUser.model_validate(user),
        projects=ExportProjects(
            created=[ProjectOverview.model_validate(p) for p in created],
            member_of=[
                ExportedMembership(
                    project_id=m.project_id,
                    project_name=m.project.name,
                    role=m.role,
                    joined_at=m.created_at,
                    task_count=m.project.task_count,
                )
                for m in memberships
            ],
        ),
        tasks=[TaskResponse.model_validate(t) for t in tasks],
        personal_todos=[PersonalTodoResponse.model_validate(t) for t in todos],
        notifications=[NotificationResponse.model_validate(n) for n in notifications],
        export_date=now,
        total_projects=len(project_ids),
        total_tasks=len(tasks),
        total_todos=len(todos),
        total_notifications=len(notifications),
    )
