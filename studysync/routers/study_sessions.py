"""
Study session log.

Sessions are written by the client or by a completing countdown timer
(see services.timer_registry); they are never edited.
"""
import logging
from typing import Dict, List

from fastapi import APIRouter, Depends, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from studysync.database import get_db
from studysync.dependencies.auth import get_or_create_user
from studysync.models.database_models import StudySession, User
from studysync.models.schemas import StudySessionCreate, StudySessionResponse, StudyStatsResponse
from studysync.services.repository import Repository
from studysync.services.timer import DEFAULT_SUBJECT_LABEL
from studysync.utils.helpers import format_study_time

logger = logging.getLogger(__name__)

router = APIRouter()

sessions = Repository(StudySession, order_by=[StudySession.created_at.desc()])


@router.get("", response_model=List[StudySessionResponse])
async def list_study_sessions(
    user: User = Depends(get_or_create_user),
    db: AsyncSession = Depends(get_db),
):
    return await sessions.list_for_user(db, user.id)


@router.post("", response_model=StudySessionResponse, status_code=status.HTTP_201_CREATED)
async def create_study_session(
    body: StudySessionCreate,
    user: User = Depends(get_or_create_user),
    db: AsyncSession = Depends(get_db),
):
    return await sessions.create(db, user.id, body.model_dump())


@router.get("/stats", response_model=StudyStatsResponse)
async def study_stats(
    user: User = Depends(get_or_create_user),
    db: AsyncSession = Depends(get_db),
):
    """Totals across every logged session, with minutes grouped by subject."""
    result = await db.execute(
        select(
            StudySession.subject,
            func.count(StudySession.id),
            func.coalesce(func.sum(StudySession.duration), 0),
        )
        .where(StudySession.user_id == user.id)
        .group_by(StudySession.subject)
    )

    by_subject: Dict[str, int] = {}
    session_count = 0
    for subject, count, minutes in result.all():
        label = subject or DEFAULT_SUBJECT_LABEL
        by_subject[label] = by_subject.get(label, 0) + int(minutes)
        session_count += int(count)

    total = sum(by_subject.values())
    return StudyStatsResponse(
        session_count=session_count,
        total_minutes=total,
        total_formatted=format_study_time(total),
        minutes_by_subject=by_subject,
    )
