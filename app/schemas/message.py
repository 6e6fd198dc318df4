from __future__ import annotations

from pydantic import Field
from datetime import datetime
from typing import Optional, List

from app.schemas.common import CamelModel, UserSummary


class MessageCreate(CamelModel):
    content: str = Field(min_length=1, max_length=2000)
    parent_id: Optional[int] = None


class MessageUpdate(CamelModel):
    content: str = Field(min_length=1, max_length=2000)


class MessageResponse(CamelModel):
    id: int
    project_id: int
    user_id: int
    parent_id: Optional[int]
    content: str
    created_at: datetime
    updated_at: datetime
    author: UserSummary
    replies: List[MessageResponse] = []


class MessageEnvelope(CamelModel):
    success: bool = True
    message: str = ""
    data: MessageResponse


class MessageListResponse(CamelModel):
    success: bool = True
    messages: List[MessageResponse]
