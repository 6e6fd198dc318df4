from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import Optional

from app.core.database import get_db
from app.core.deps import get_current_user, require_project_member, ensure_member
from app.models.user import User
from app.models.project import Project
from app.models.task import Task
from app.schemas.common import StatusResponse
from app.schemas.task import (
    TaskCreate,
    TaskUpdate,
    TaskStatusUpdate,
    TaskEnvelope,
    TaskListResponse,
    ProjectTasksResponse,
)
from app.services import notification_service, project_service
from app.services.task_service import get_assigned_tasks, group_by_status

router = APIRouter(prefix="/tasks", tags=["tasks"])


def get_task_for_member(db: Session, task_id: int, user: User) -> Task:
    task = db.query(Task).filter(Task.id == task_id).first()
    if not task:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
    ensure_member(db, task.project_id, user)
    return task


def check_assignee(db: Session, project_id: int, assignee_id: Optional[int]):
    if assignee_id is not None and not project_service.is_member(db, project_id, assignee_id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Assignee must be a project member")


def apply_update(db: Session, task: Task, update_data: dict) -> Task:
    """Apply the changes, commit, then emit the notifications the changes call for."""
    previous_assignee_id = task.assignee_id
    previous_status = task.status

    for field, value in update_data.items():
        setattr(task, field, value)

    db.commit()
    db.refresh(task)

    notification_service.notify_task_updated(db, task, previous_assignee_id, previous_status)
    db.refresh(task)
    return task


@router.get("/my-tasks", response_model=TaskListResponse)
def my_tasks(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return {"success": True, "tasks": get_assigned_tasks(db, current_user.id)}


@router.post("/projects/{project_id}", response_model=TaskEnvelope, status_code=status.HTTP_201_CREATED)
def create_task(
    task_data: TaskCreate,
    project: Project = Depends(require_project_member),
    db: Session = Depends(get_db)
):
    check_assignee(db, project.id, task_data.assignee_id)

    new_task = Task(
        project_id=project.id,
        title=task_data.title,
        description=task_data.description,
        assignee_id=task_data.assignee_id,
        due_date=task_data.due_date,
        status=task_data.status
    )
    db.add(new_task)
    db.commit()
    db.refresh(new_task)

    notification_service.notify_task_created(db, new_task)
    db.refresh(new_task)
    return {"success": True, "message": "Task created successfully", "task": new_task}


@router.get("/projects/{project_id}", response_model=ProjectTasksResponse)
def project_tasks(
    project: Project = Depends(require_project_member),
    db: Session = Depends(get_db)
):
    tasks = db.query(Task).filter(Task.project_id == project.id).order_by(Task.created_at.desc()).all()
    return {"success": True, "tasks": tasks, "tasks_by_status": group_by_status(tasks)}


@router.get("/{task_id}", response_model=TaskEnvelope)
def get_task(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return {"success": True, "task": get_task_for_member(db, task_id, current_user)}


@router.put("/{task_id}", response_model=TaskEnvelope)
def update_task(
    task_id: int,
    task_data: TaskUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    task = get_task_for_member(db, task_id, current_user)

    update_data = task_data.model_dump(exclude_unset=True)
    if update_data.get("status", "") is None or update_data.get("title", "") is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Title and status cannot be null")
    if "assignee_id" in update_data:
        check_assignee(db, task.project_id, update_data["assignee_id"])

    task = apply_update(db, task, update_data)
    return {"success": True, "message": "Task updated successfully", "task": task}


@router.patch("/{task_id}/status", response_model=TaskEnvelope)
def update_status(
    task_id: int,
    data: TaskStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    task = get_task_for_member(db, task_id, current_user)
    task = apply_update(db, task, {"status": data.status})
    return {"success": True, "message": "Task status updated successfully", "task": task}


@router.delete("/{task_id}", response_model=StatusResponse)
def delete_task(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    task = get_task_for_member(db, task_id, current_user)
    db.delete(task)
    db.commit()
    return {"success": True, "message": "Task deleted successfully"}
