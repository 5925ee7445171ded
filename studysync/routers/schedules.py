"""
Schedule endpoints.

GET    /api/schedules             - user's entries by start time
POST   /api/schedules             - create (end_time must not precede start_time)
PUT    /api/schedules/{id}        - partial update, ordering re-checked on the merged row
DELETE /api/schedules/{id}        - delete (idempotent)
GET    /api/schedules/export.ics  - download all entries as an iCalendar file
"""
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from studysync.database import get_db
from studysync.dependencies.auth import get_or_create_user
from studysync.models.database_models import Schedule, User
from studysync.models.schemas import ScheduleCreate, ScheduleResponse, ScheduleUpdate, SuccessResponse
from studysync.services.calendar_export import as_utc, schedules_to_ics
from studysync.services.repository import Repository

logger = logging.getLogger(__name__)

router = APIRouter()

schedules = Repository(Schedule, order_by=[Schedule.start_time.asc()])


@router.get("", response_model=List[ScheduleResponse])
async def list_schedules(
    user: User = Depends(get_or_create_user),
    db: AsyncSession = Depends(get_db),
):
    return await schedules.list_for_user(db, user.id)


@router.get("/export.ics")
async def export_schedules(
    user: User = Depends(get_or_create_user),
    db: AsyncSession = Depends(get_db),
):
    """Export the user's schedule as ``studysync-calendar.ics``."""
    rows = await schedules.list_for_user(db, user.id)
    logger.info("Exporting %d schedule entries for user=%d", len(rows), user.id)
    return Response(
        content=schedules_to_ics(rows),
        media_type="text/calendar; charset=utf-8",
        headers={"Content-Disposition": 'attachment; filename="studysync-calendar.ics"'},
    )


@router.post("", response_model=ScheduleResponse, status_code=status.HTTP_201_CREATED)
async def create_schedule(
    body: ScheduleCreate,
    user: User = Depends(get_or_create_user),
    db: AsyncSession = Depends(get_db),
):
    return await schedules.create(db, user.id, body.model_dump())


@router.put("/{schedule_id}", response_model=ScheduleResponse)
async def update_schedule(
    schedule_id: int,
    body: ScheduleUpdate,
    user: User = Depends(get_or_create_user),
    db: AsyncSession = Depends(get_db),
):
    existing = await schedules.get(db, schedule_id, user.id)
    if existing is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Schedule not found")

    values = body.model_dump(exclude_unset=True)
    start = values.get("start_time") or existing.start_time
    end = values.get("end_time") or existing.end_time
    if as_utc(end) < as_utc(start):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="end_time must not be before start_time",
        )

    return await schedules.update(db, schedule_id, user.id, values)


@router.delete("/{schedule_id}", response_model=SuccessResponse)
async def delete_schedule(
    schedule_id: int,
    user: User = Depends(get_or_create_user),
    db: AsyncSession = Depends(get_db),
):
    await schedules.delete(db, schedule_id, user.id)
    return SuccessResponse()
