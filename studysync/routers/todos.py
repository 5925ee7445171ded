"""
Todo endpoints.

Listing supports server-side filtering:

    GET /api/todos?completed=false&priority=high
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from studysync.database import get_db
from studysync.dependencies.auth import get_or_create_user
from studysync.models.database_models import Todo, User
from studysync.models.schemas import (
    SuccessResponse,
    TodoCreate,
    TodoPrioritySchema,
    TodoResponse,
    TodoUpdate,
)
from studysync.services.repository import Repository

logger = logging.getLogger(__name__)

router = APIRouter()

todos = Repository(Todo, order_by=[Todo.created_at.desc()])


@router.get("", response_model=List[TodoResponse])
async def list_todos(
    completed: Optional[bool] = Query(None, description="Only done / only open todos"),
    priority: Optional[TodoPrioritySchema] = Query(None),
    user: User = Depends(get_or_create_user),
    db: AsyncSession = Depends(get_db),
):
    filters = []
    if completed is not None:
        filters.append(Todo.completed == completed)
    if priority is not None:
        filters.append(Todo.priority == priority.value)
    return await todos.list_for_user(db, user.id, filters)


@router.post("", response_model=TodoResponse, status_code=status.HTTP_201_CREATED)
async def create_todo(
    body: TodoCreate,
    user: User = Depends(get_or_create_user),
    db: AsyncSession = Depends(get_db),
):
    return await todos.create(db, user.id, body.model_dump())


@router.put("/{todo_id}", response_model=TodoResponse)
async def update_todo(
    todo_id: int,
    body: TodoUpdate,
    user: User = Depends(get_or_create_user),
    db: AsyncSession = Depends(get_db),
):
    todo = await todos.update(db, todo_id, user.id, body.model_dump(exclude_unset=True))
    if todo is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Todo not found")
    return todo


@router.delete("/{todo_id}", response_model=SuccessResponse)
async def delete_todo(
    todo_id: int,
    user: User = Depends(get_or_create_user),
    db: AsyncSession = Depends(get_db),
):
    await todos.delete(db, todo_id, user.id)
    return SuccessResponse()
