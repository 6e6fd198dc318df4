"""Project service: membership checks and project queries"""

from sqlalchemy import or_, select
from sqlalchemy.orm import Session, selectinload
from typing import List, Optional

from app.models.project import Project
from app.models.project_member import ProjectMember, ROLE_ADMIN


def get_membership(db: Session, project_id: int, user_id: int) -> Optional[ProjectMember]:
    return db.query(ProjectMember).filter(
        ProjectMember.project_id == project_id,
        ProjectMember.user_id == user_id
    ).first()


def is_member(db: Session, project_id: int, user_id: int) -> bool:
    return get_membership(db, project_id, user_id) is not None


def is_admin(db: Session, project: Project, user_id: int) -> bool:
    # le créateur est toujours admin, même si son rôle a été modifié
    if project.created_by == user_id:
        return True
    membership = get_membership(db, project.id, user_id)
    return membership is not None and membership.role == ROLE_ADMIN


def get_member_ids(db: Session, project_id: int) -> List[int]:
    rows = db.query(ProjectMember.user_id).filter(ProjectMember.project_id == project_id).all()
    return [row.user_id for row in rows]


def get_user_projects(db: Session, user_id: int) -> List[Project]:
    """Projects the user created or belongs to, most recently updated first."""
    member_of = select(ProjectMember.project_id).where(ProjectMember.user_id == user_id)

    return db.query(Project).options(
        selectinload(Project.creator),
        selectinload(Project.members).selectinload(ProjectMember.user)
    ).filter(
        or_(Project.created_by == user_id, Project.id.in_(member_of))
    ).order_by(Project.updated_at.desc()).all()


def create_project(db: Session, user_id: int, name: str, description: Optional[str]) -> Project:
    project = Project(name=name, description=description, created_by=user_id)
    # le créateur est inséré comme admin dans le même commit
    project.members.append(ProjectMember(user_id=user_id, role=ROLE_ADMIN))
    db.add(project)
    db.commit()
    db.refresh(project)
    return project
