from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session, selectinload

from app.core.database import get_db
from app.core.deps import get_current_user, require_project_member, ensure_member
from app.models.user import User
from app.models.project import Project
from app.models.message import Message
from app.schemas.common import StatusResponse
from app.schemas.message import MessageCreate, MessageUpdate, MessageEnvelope, MessageListResponse
from app.services import notification_service

router = APIRouter(prefix="/discussions", tags=["discussions"])


def get_message_or_404(db: Session, message_id: int) -> Message:
    message = db.query(Message).filter(Message.id == message_id).first()
    if not message:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Message not found")
    return message


def get_own_message(db: Session, message_id: int, user: User, action: str) -> Message:
    message = get_message_or_404(db, message_id)
    if message.user_id != user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=f"You can only {action} your own messages")
    return message


@router.post("/projects/{project_id}", response_model=MessageEnvelope, status_code=status.HTTP_201_CREATED)
def create_message(
    data: MessageCreate,
    project: Project = Depends(require_project_member),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    if data.parent_id is not None:
        parent = db.query(Message).filter(
            Message.id == data.parent_id,
            Message.project_id == project.id
        ).first()
        if not parent:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Parent message not found")

    message = Message(
        project_id=project.id,
        user_id=current_user.id,
        content=data.content,
        parent_id=data.parent_id
    )
    db.add(message)
    db.commit()
    db.refresh(message)

    notification_service.notify_new_message(db, message)
    db.refresh(message)
    return {"success": True, "message": "Message created successfully", "data": message}


@router.get("/projects/{project_id}", response_model=MessageListResponse)
def project_messages(
    project: Project = Depends(require_project_member),
    db: Session = Depends(get_db)
):
    messages = db.query(Message).options(
        selectinload(Message.author),
        selectinload(Message.replies)
    ).filter(
        Message.project_id == project.id,
        Message.parent_id == None
    ).order_by(Message.created_at.desc()).all()

    return {"success": True, "messages": messages}


@router.get("/{message_id}", response_model=MessageEnvelope)
def get_message(
    message_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    message = get_message_or_404(db, message_id)
    ensure_member(db, message.project_id, current_user)
    return {"success": True, "data": message}


@router.put("/{message_id}", response_model=MessageEnvelope)
def update_message(
    message_id: int,
    data: MessageUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    message = get_own_message(db, message_id, current_user, "edit")
    message.content = data.content
    db.commit()
    db.refresh(message)
    return {"success": True, "message": "Message updated successfully", "data": message}


@router.delete("/{message_id}", response_model=StatusResponse)
def delete_message(
    message_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    message = get_own_message(db, message_id, current_user, "delete")
    db.delete(message)
    db.commit()
    return {"success": True, "message": "Message deleted successfully"}
