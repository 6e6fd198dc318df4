from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.deps import get_current_user
from app.models.user import User
from app.models.personal_todo import PersonalTodo
from app.schemas.common import StatusResponse
from app.schemas.personal_todo import (
    PersonalTodoCreate,
    PersonalTodoUpdate,
    PersonalTodoEnvelope,
    PersonalTodoListResponse,
)

router = APIRouter(prefix="/personal-todos", tags=["personal-todos"])


def get_own_todo(db: Session, todo_id: int, user: User) -> PersonalTodo:
    todo = db.query(PersonalTodo).filter(
        PersonalTodo.id == todo_id,
        PersonalTodo.user_id == user.id
    ).first()

    if not todo:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Personal todo not found")

    return todo


@router.post("", response_model=PersonalTodoEnvelope, status_code=status.HTTP_201_CREATED)
def create_todo(
    data: PersonalTodoCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    todo = PersonalTodo(
        user_id=current_user.id,
        title=data.title,
        description=data.description,
        priority=data.priority,
        due_date=data.due_date
    )
    db.add(todo)
    db.commit()
    db.refresh(todo)
    return {"success": True, "message": "Personal todo created successfully", "personal_todo": todo}


@router.get("", response_model=PersonalTodoListResponse)
def list_todos(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    todos = db.query(PersonalTodo).filter(
        PersonalTodo.user_id == current_user.id
    ).order_by(PersonalTodo.created_at.desc()).all()
    return {"success": True, "personal_todos": todos}


@router.get("/{todo_id}", response_model=PersonalTodoEnvelope)
def get_todo(
    todo_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return {"success": True, "personal_todo": get_own_todo(db, todo_id, current_user)}


@router.put("/{todo_id}", response_model=PersonalTodoEnvelope)
def update_todo(
    todo_id: int,
    data: PersonalTodoUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    todo = get_own_todo(db, todo_id, current_user)

    update_data = data.model_dump(exclude_unset=True)
    for field in ("title", "priority", "completed"):
        if field in update_data and update_data[field] is None:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"{field} cannot be null")

    for field, value in update_data.items():
        setattr(todo, field, value)

    db.commit()
    db.refresh(todo)
    return {"success": True, "message": "Personal todo updated successfully", "personal_todo": todo}


@router.patch("/{todo_id}/toggle", response_model=PersonalTodoEnvelope)
def toggle_todo(
    todo_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    todo = get_own_todo(db, todo_id, current_user)
    todo.completed = not todo.completed
    db.commit()
    db.refresh(todo)
    return {"success": True, "message": "Personal todo toggled successfully", "personal_todo": todo}


@router.delete("/{todo_id}", response_model=StatusResponse)
def delete_todo(
    todo_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    todo = get_own_todo(db, todo_id, current_user)
    db.delete(todo)
    db.commit()
    return {"success": True, "message": "Personal todo deleted successfully"}
