"""Task model"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
from app.core.database import Base

STATUS_TODO = "To-Do"
STATUS_IN_PROGRESS = "In Progress"
STATUS_DONE = "Done"
TASK_STATUSES = [STATUS_TODO, STATUS_IN_PROGRESS, STATUS_DONE]


class Task(Base):
    __tablename__ = "tasks"
    
    id = Column(Integer, primary_key=True, index=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=False, index=True)
    # pas de FK stricte vers le membre : l'assigné peut quitter le projet
    assignee_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    
    title = Column(String(200), nullable=False)
    description = Column(String(1000), nullable=True)
    status = Column(String(20), default=STATUS_TODO, nullable=False)
    due_date = Column(DateTime, nullable=True, index=True)
    
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    project = relationship("Project", back_populates="tasks")
    assignee = relationship("User")
