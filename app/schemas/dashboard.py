"""Response shapes of the aggregation endpoints (dashboard, insights, report, activity)."""

from datetime import datetime
from typing import Annotated, Optional, List, Dict

from pydantic import Field

from app.schemas.common import CamelModel
from app.schemas.task import TaskResponse
from app.schemas.personal_todo import PersonalTodoResponse
from app.schemas.notification import NotificationResponse
from app.schemas.project import ProjectOverview

# unité : jours (1 décimale) ; None si aucune tâche terminée sur la période
CompletionDays = Annotated[
    Optional[float],
    Field(description="Mean time from creation to completion of Done tasks, in days", json_schema_extra={"unit": "days"}),
]


# ============ ROLLUPS ============

class ProjectStats(CamelModel):
    total: int
    active: int
    total_tasks: int
    total_members: int


class TaskStats(CamelModel):
    total: int
    todo: int
    in_progress: int
    completed: int
    overdue: int


class TodoStats(CamelModel):
    total: int
    pending: int
    completed: int
    overdue: int


class NotificationStats(CamelModel):
    total: int
    # non lues parmi les 10 plus récentes uniquement
    unread_among_recent: int


class DashboardStats(CamelModel):
    projects: ProjectStats
    tasks: TaskStats
    personal_todos: TodoStats
    notifications: NotificationStats


class ProjectTaskDistribution(CamelModel):
    project_id: int
    project_name: str
    task_count: int
    completed_tasks: int
    in_progress_tasks: int
    todo_tasks: int


class DayProgress(CamelModel):
    day: str
    date: str
    completed: int
    created: int


class DashboardData(CamelModel):
    stats: DashboardStats
    task_distribution: List[ProjectTaskDistribution]
    recent_activity: List[TaskResponse]
    weekly_progress: List[DayProgress]
    projects: List[ProjectOverview]
    tasks: List[TaskResponse]
    personal_todos: List[PersonalTodoResponse]
    notifications: List[NotificationResponse]


class DashboardResponse(CamelModel):
    success: bool = True
    data: DashboardData


# ============ INSIGHTS ============

class ProductivityInsights(CamelModel):
    tasks_completed_this_month: int
    average_completion_time: CompletionDays
    most_productive_day: Optional[str]
    top_project: Dict[str, int]
    productivity_score: int


class InsightsResponse(CamelModel):
    success: bool = True
    insights: ProductivityInsights


# ============ REPORT ============

class ReportPeriod(CamelModel):
    start: datetime
    end: datetime
    type: str


class ReportTodoStats(TodoStats):
    by_priority: Dict[str, int]


class ReportProductivity(CamelModel):
    completion_rate: int
    average_completion_time: CompletionDays
    most_productive_day: Optional[str]
    top_project: Dict[str, int]


class ReportStatistics(CamelModel):
    period: ReportPeriod
    tasks: TaskStats
    personal_todos: ReportTodoStats
    productivity: ReportProductivity


class ReportUser(CamelModel):
    name: str
    username: str
    email: str


class ReportTask(CamelModel):
    title: str
    status: str
    project: str
    created_at: datetime
    updated_at: datetime
    due_date: Optional[datetime]


class ReportTodo(CamelModel):
    title: str
    completed: bool
    priority: str
    created_at: datetime
    due_date: Optional[datetime]


class ReportData(CamelModel):
    user: ReportUser
    statistics: ReportStatistics
    tasks: List[ReportTask]
    personal_todos: List[ReportTodo]
    generated_at: datetime


class ReportResponse(CamelModel):
    success: bool = True
    message: str = "Report generated successfully"
    data: ReportData


# ============ ACTIVITY ============

class ActivityEntry(CamelModel):
    id: str
    type: str
    action: str
    title: str
    project: Optional[str] = None
    status: str
    timestamp: datetime


class ActivityLog(CamelModel):
    activities: List[ActivityEntry]
    total: int
    has_more: bool


class ActivityResponse(CamelModel):
    success: bool = True
    message: str = "Activity log retrieved successfully"
    data: ActivityLog


# ============ EXPORT ============

class ExportedMembership(CamelModel):
    project_id: int
    project_name: str
    role: str
    joined_at: datetime
    task_count: int


class ExportProjects(CamelModel):
    created: List[ProjectOverview]
    member_of: List[ExportedMembership]


class ExportData(CamelModel):
    user: ReportUser
    projects: ExportProjects
    tasks: List[TaskResponse]
    personal_todos: List[PersonalTodoResponse]
    notifications: List[NotificationResponse]
    export_date: datetime
    total_projects: int
    total_tasks: int
    total_todos: int
    total_notifications: int


class ExportResponse(CamelModel):
    success: bool = True
    message: str = "User data exported successfully"
    data: ExportData
