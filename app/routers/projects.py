from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session, selectinload

from app.core.database import get_db
from app.core.deps import get_current_user, require_project_member, require_project_admin
from app.models.user import User
from app.models.project import Project
from app.models.project_member import ProjectMember, ROLE_MEMBER
from app.models.message import Message
from app.models.task import Task
from app.schemas.common import StatusResponse
from app.schemas.project import (
    ProjectCreate,
    ProjectUpdate,
    AddMemberRequest,
    ProjectEnvelope,
    ProjectDetailEnvelope,
    ProjectListResponse,
    MemberEnvelope,
)
from app.services import project_service

router = APIRouter(prefix="/projects", tags=["projects"])


@router.post("", response_model=ProjectEnvelope, status_code=status.HTTP_201_CREATED)
def create_project(
    data: ProjectCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    project = project_service.create_project(db, current_user.id, data.name, data.description)
    return {"success": True, "message": "Project created successfully", "project": project}


@router.get("", response_model=ProjectListResponse)
def list_projects(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return {"success": True, "projects": project_service.get_user_projects(db, current_user.id)}


@router.get("/{project_id}", response_model=ProjectDetailEnvelope)
def get_project(
    project: Project = Depends(require_project_member),
    db: Session = Depends(get_db)
):
    tasks = db.query(Task).filter(Task.project_id == project.id).order_by(Task.created_at.desc()).all()
    # seulement les messages racines, les réponses suivent via la relation
    messages = db.query(Message).options(
        selectinload(Message.replies)
    ).filter(
        Message.project_id == project.id,
        Message.parent_id == None
    ).order_by(Message.created_at.desc()).all()

    return {
        "success": True,
        "project": {
            "id": project.id,
            "name": project.name,
            "description": project.description,
            "created_by": project.created_by,
            "created_at": project.created_at,
            "updated_at": project.updated_at,
            "task_count": project.task_count,
            "member_count": project.member_count,
            "message_count": project.message_count,
            "creator": project.creator,
            "members": project.members,
            "tasks": tasks,
            "messages": messages,
        }
    }


@router.put("/{project_id}", response_model=ProjectEnvelope)
def update_project(
    data: ProjectUpdate,
    project: Project = Depends(require_project_admin),
    db: Session = Depends(get_db)
):
    update_data = data.model_dump(exclude_unset=True)
    if "name" in update_data and update_data["name"] is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="name cannot be null")

    for field, value in update_data.items():
        setattr(project, field, value)

    db.commit()
    db.refresh(project)
    return {"success": True, "message": "Project updated successfully", "project": project}


@router.delete("/{project_id}", response_model=StatusResponse)
def delete_project(
    project: Project = Depends(require_project_admin),
    db: Session = Depends(get_db)
):
    db.delete(project)
    db.commit()
    return {"success": True, "message": "Project deleted successfully"}


@router.post("/{project_id}/members", response_model=MemberEnvelope, status_code=status.HTTP_201_CREATED)
def add_member(
    data: AddMemberRequest,
    project: Project = Depends(require_project_admin),
    db: Session = Depends(get_db)
):
    user = db.query(User).filter(User.email == data.email).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    if project_service.is_member(db, project.id, user.id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User is already a member of this project")

    member = ProjectMember(project_id=project.id, user_id=user.id, role=ROLE_MEMBER)
    db.add(member)
    db.commit()
    db.refresh(member)
    return {"success": True, "message": "Member added successfully", "member": member}


@router.delete("/{project_id}/members/{member_id}", response_model=StatusResponse)
def remove_member(
    member_id: int,
    project: Project = Depends(require_project_admin),
    db: Session = Depends(get_db)
):
    member = db.query(ProjectMember).filter(
        ProjectMember.id == member_id,
        ProjectMember.project_id == project.id
    ).first()

    if not member:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Member not found")

    if member.user_id == project.created_by:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="The project creator cannot be removed")

    # les tâches assignées à ce membre gardent leur assigné
    db.delete(member)
    db.commit()
    return {"success": True, "message": "Member removed successfully"}
