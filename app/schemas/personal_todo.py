from pydantic import Field
from datetime import datetime
from typing import Optional, List, Literal

from app.schemas.common import CamelModel, UtcDatetime

Priority = Literal["Low", "Medium", "High"]


class PersonalTodoCreate(CamelModel):
    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=1000)
    priority: Priority = "Medium"
    due_date: Optional[UtcDatetime] = None


class PersonalTodoUpdate(CamelModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=1000)
    priority: Optional[Priority] = None
    completed: Optional[bool] = None
    due_date: Optional[UtcDatetime] = None


class PersonalTodoResponse(CamelModel):
    id: int
    user_id: int
    title: str
    description: Optional[str]
    priority: str
    completed: bool
    due_date: Optional[datetime]
    created_at: datetime
    updated_at: datetime


class PersonalTodoEnvelope(CamelModel):
    success: bool = True
    message: str = ""
    personal_todo: PersonalTodoResponse


class PersonalTodoListResponse(CamelModel):
    success: bool = True
    personal_todos: List[PersonalTodoResponse]
