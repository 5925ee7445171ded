"""
Flashcard deck endpoints.

A deck is stored as one row; its cards are a JSON list of {front, back}.
"""
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from studysync.database import get_db
from studysync.dependencies.auth import get_or_create_user
from studysync.models.database_models import Flashcard, User
from studysync.models.schemas import (
    FlashcardDeckCreate,
    FlashcardDeckResponse,
    FlashcardDeckUpdate,
    SuccessResponse,
)
from studysync.services.repository import Repository

logger = logging.getLogger(__name__)

router = APIRouter()

decks = Repository(Flashcard, order_by=[Flashcard.updated_at.desc()])


@router.get("", response_model=List[FlashcardDeckResponse])
async def list_decks(
    user: User = Depends(get_or_create_user),
    db: AsyncSession = Depends(get_db),
):
    return await decks.list_for_user(db, user.id)


@router.post("", response_model=FlashcardDeckResponse, status_code=status.HTTP_201_CREATED)
async def create_deck(
    body: FlashcardDeckCreate,
    user: User = Depends(get_or_create_user),
    db: AsyncSession = Depends(get_db),
):
    return await decks.create(db, user.id, body.model_dump())


@router.put("/{deck_id}", response_model=FlashcardDeckResponse)
async def update_deck(
    deck_id: int,
    body: FlashcardDeckUpdate,
    user: User = Depends(get_or_create_user),
    db: AsyncSession = Depends(get_db),
):
    deck = await decks.update(db, deck_id, user.id, body.model_dump(exclude_unset=True))
    if deck is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Flashcard deck not found")
    return deck


@router.delete("/{deck_id}", response_model=SuccessResponse)
async def delete_deck(
    deck_id: int,
    user: User = Depends(get_or_create_user),
    db: AsyncSession = Depends(get_db),
):
    await decks.delete(db, deck_id, user.id)
    return SuccessResponse()
