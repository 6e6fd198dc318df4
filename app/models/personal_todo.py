"""Personal todo model"""

from sqlalchemy import Column, Integer, String, DateTime, Boolean, ForeignKey
from datetime import datetime
from app.core.database import Base

PRIORITIES = ["Low", "Medium", "High"]


class PersonalTodo(Base):
    __tablename__ = "personal_todos"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    title = Column(String(200), nullable=False)
    description = Column(String(1000), nullable=True)
    priority = Column(String(10), default="Medium", nullable=False)
    completed = Column(Boolean, default=False, nullable=False)
    due_date = Column(DateTime, nullable=True, index=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
