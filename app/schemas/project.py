from pydantic import EmailStr, Field
from datetime import datetime
from typing import Optional, List

from app.schemas.common import CamelModel, UserSummary
from app.schemas.task import TaskResponse
from app.schemas.message import MessageResponse

# Schemas projets

class ProjectCreate(CamelModel):
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)

class ProjectUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)

class AddMemberRequest(CamelModel):
    email: EmailStr

class MemberResponse(CamelModel):
    id: int
    project_id: int
    user_id: int
    role: str
    created_at: datetime
    user: UserSummary

class ProjectOverview(CamelModel):
    """Project row plus its aggregate counts."""

    id: int
    name: str
    description: Optional[str]
    created_by: int
    created_at: datetime
    updated_at: datetime
    task_count: int
    member_count: int
    message_count: int

class ProjectResponse(ProjectOverview):
    creator: UserSummary
    members: List[MemberResponse] = []

class ProjectDetail(ProjectResponse):
    tasks: List[TaskResponse] = []
    messages: List[MessageResponse] = []

class ProjectEnvelope(CamelModel):
    success: bool = True
    message: str = ""
    project: ProjectResponse

class ProjectDetailEnvelope(CamelModel):
    success: bool = True
    project: ProjectDetail

class ProjectListResponse(CamelModel):
    success: bool = True
    projects: List[ProjectResponse]

class MemberEnvelope(CamelModel):
    success: bool = True
    message: str = ""
    member: MemberResponse
