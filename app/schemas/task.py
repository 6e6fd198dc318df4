"""Pydantic schemas for task request/response validation."""

from pydantic import Field
from datetime import datetime
from typing import Optional, List, Dict, Literal

from app.schemas.common import CamelModel, UserSummary, UtcDatetime

TaskStatus = Literal["To-Do", "In Progress", "Done"]


class TaskCreate(CamelModel):
    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=1000)
    assignee_id: Optional[int] = None
    due_date: Optional[UtcDatetime] = None
    status: TaskStatus = "To-Do"


class TaskUpdate(CamelModel):
    """Partial update: only the fields sent are applied."""

    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=1000)
    assignee_id: Optional[int] = None
    due_date: Optional[UtcDatetime] = None
    status: Optional[TaskStatus] = None


class TaskStatusUpdate(CamelModel):
    status: TaskStatus


class ProjectRef(CamelModel):
    id: int
    name: str


class TaskResponse(CamelModel):
    id: int
    project_id: int
    title: str
    description: Optional[str]
    status: str
    assignee_id: Optional[int]
    due_date: Optional[datetime]
    created_at: datetime
    updated_at: datetime
    assignee: Optional[UserSummary] = None
    project: ProjectRef


class TaskEnvelope(CamelModel):
    success: bool = True
    message: str = ""
    task: TaskResponse


class TaskListResponse(CamelModel):
    success: bool = True
    tasks: List[TaskResponse]


class ProjectTasksResponse(TaskListResponse):
    tasks_by_status: Dict[str, List[TaskResponse]]
