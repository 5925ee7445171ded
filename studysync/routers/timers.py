"""
Countdown timer endpoints.

Route summary
-------------
POST   /api/timers              - create a timer (idle)
GET    /api/timers              - the caller's timers, oldest first
GET    /api/timers/{id}         - snapshot
POST   /api/timers/{id}/start   - begin / resume (no-op while running or at zero)
POST   /api/timers/{id}/pause   - stop ticking, keep remaining
POST   /api/timers/{id}/reset   - back to the full duration
POST   /api/timers/{id}/mode    - switch preset / custom duration (lands idle)
DELETE /api/timers/{id}         - cancel and forget

Timers run inside this process; a completed run is logged as a StudySession.
"""
from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from studysync.dependencies.auth import get_current_user_id, get_or_create_user
from studysync.models.database_models import User
from studysync.models.schemas import (
    SuccessResponse,
    TimerCreateRequest,
    TimerModeRequest,
    TimerResponse,
)
from studysync.services.timer import TimerMode
from studysync.services.timer_registry import TimerEntry, timer_registry

logger = logging.getLogger(__name__)

router = APIRouter()


def _snapshot(entry: TimerEntry) -> TimerResponse:
    timer = entry.timer
    return TimerResponse(
        id=entry.id,
        user_id=entry.user_id,
        mode=entry.mode.value,
        subject=timer.subject,
        state=timer.state.value,
        total_duration=timer.total_duration,
        remaining=timer.remaining,
        remaining_formatted=timer.remaining_formatted,
        running=timer.running,
        completed=timer.completed,
        created_at=entry.created_at,
    )


def _not_found(timer_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Timer {timer_id} not found.",
    )


@router.post("", response_model=TimerResponse, status_code=status.HTTP_201_CREATED)
async def create_timer(
    body: TimerCreateRequest,
    user: User = Depends(get_or_create_user),
) -> TimerResponse:
    """Create an idle timer.  The user row is ensured so completions can be logged."""
    try:
        entry = timer_registry.create(
            user.id,
            mode=TimerMode(body.mode.value),
            duration_seconds=body.duration_seconds,
            subject=body.subject,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))
    return _snapshot(entry)


@router.get("", response_model=List[TimerResponse])
async def list_timers(user_id: int = Depends(get_current_user_id)) -> List[TimerResponse]:
    return [_snapshot(e) for e in timer_registry.list_for_user(user_id)]


@router.get("/{timer_id}", response_model=TimerResponse)
async def get_timer(timer_id: str, user_id: int = Depends(get_current_user_id)) -> TimerResponse:
    try:
        return _snapshot(timer_registry.get(timer_id, user_id))
    except KeyError:
        raise _not_found(timer_id)


@router.post("/{timer_id}/start", response_model=TimerResponse)
async def start_timer(timer_id: str, user_id: int = Depends(get_current_user_id)) -> TimerResponse:
    try:
        return _snapshot(timer_registry.start(timer_id, user_id))
    except KeyError:
        raise _not_found(timer_id)


@router.post("/{timer_id}/pause", response_model=TimerResponse)
async def pause_timer(timer_id: str, user_id: int = Depends(get_current_user_id)) -> TimerResponse:
    try:
        return _snapshot(timer_registry.pause(timer_id, user_id))
    except KeyError:
        raise _not_found(timer_id)


@router.post("/{timer_id}/reset", response_model=TimerResponse)
async def reset_timer(timer_id: str, user_id: int = Depends(get_current_user_id)) -> TimerResponse:
    try:
        return _snapshot(timer_registry.reset(timer_id, user_id))
    except KeyError:
        raise _not_found(timer_id)


@router.post("/{timer_id}/mode", response_model=TimerResponse)
async def set_timer_mode(
    timer_id: str,
    body: TimerModeRequest,
    user_id: int = Depends(get_current_user_id),
) -> TimerResponse:
    try:
        entry = timer_registry.set_mode(
            timer_id,
            user_id,
            TimerMode(body.mode.value),
            duration_seconds=body.duration_seconds,
            subject=body.subject,
        )
    except KeyError:
        raise _not_found(timer_id)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))
    return _snapshot(entry)


@router.delete("/{timer_id}", response_model=SuccessResponse)
async def delete_timer(timer_id: str, user_id: int = Depends(get_current_user_id)) -> SuccessResponse:
    try:
        timer_registry.remove(timer_id, user_id)
    except KeyError:
        raise _not_found(timer_id)
    return SuccessResponse()
