"""Project model"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, select, func
from sqlalchemy.orm import relationship, column_property
from datetime import datetime
from app.core.database import Base
from app.models.project_member import ProjectMember
from app.models.task import Task
from app.models.message import Message


class Project(Base):
    __tablename__ = "projects"

    id = Column(Integer, primary_key=True, index=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    name = Column(String(100), nullable=False)
    description = Column(String(500), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    creator = relationship("User")
    members = relationship("ProjectMember", back_populates="project", cascade="all, delete-orphan")
    tasks = relationship("Task", back_populates="project", cascade="all, delete-orphan")
    messages = relationship("Message", back_populates="project", cascade="all, delete-orphan")

    # compteurs recalculés à chaque lecture
    task_count = column_property(
        select(func.count(Task.id)).where(Task.project_id == id).correlate_except(Task).scalar_subquery()
    )
    member_count = column_property(
        select(func.count(ProjectMember.id)).where(ProjectMember.project_id == id).correlate_except(ProjectMember).scalar_subquery()
    )
    message_count = column_property(
        select(func.count(Message.id)).where(Message.project_id == id).correlate_except(Message).scalar_subquery()
    )
