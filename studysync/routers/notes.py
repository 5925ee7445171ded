"""
Note endpoints.

GET    /api/notes        - list the user's notes, most recently edited first
POST   /api/notes        - create a note
PUT    /api/notes/{id}   - partial update
DELETE /api/notes/{id}   - delete (idempotent)
"""
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from studysync.database import get_db
from studysync.dependencies.auth import get_or_create_user
from studysync.models.database_models import Note, User
from studysync.models.schemas import NoteCreate, NoteResponse, NoteUpdate, SuccessResponse
from studysync.services.repository import Repository

logger = logging.getLogger(__name__)

router = APIRouter()

notes = Repository(Note, order_by=[Note.updated_at.desc()])


@router.get("", response_model=List[NoteResponse])
async def list_notes(
    user: User = Depends(get_or_create_user),
    db: AsyncSession = Depends(get_db),
):
    return await notes.list_for_user(db, user.id)


@router.post("", response_model=NoteResponse, status_code=status.HTTP_201_CREATED)
async def create_note(
    body: NoteCreate,
    user: User = Depends(get_or_create_user),
    db: AsyncSession = Depends(get_db),
):
    return await notes.create(db, user.id, body.model_dump())


@router.put("/{note_id}", response_model=NoteResponse)
async def update_note(
    note_id: int,
    body: NoteUpdate,
    user: User = Depends(get_or_create_user),
    db: AsyncSession = Depends(get_db),
):
    note = await notes.update(db, note_id, user.id, body.model_dump(exclude_unset=True))
    if note is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Note not found")
    return note


@router.delete("/{note_id}", response_model=SuccessResponse)
async def delete_note(
    note_id: int,
    user: User = Depends(get_or_create_user),
    db: AsyncSession = Depends(get_db),
):
    await notes.delete(db, note_id, user.id)
    return SuccessResponse()
