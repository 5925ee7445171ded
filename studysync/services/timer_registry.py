"""
In-memory registry of countdown timers driven by the asyncio event loop.

Usage
-----
    from studysync.services.timer_registry import timer_registry

    entry = timer_registry.create(user_id, TimerMode.POMODORO, subject="Maths")
    timer_registry.start(entry.id, user_id)
    # ... 25 minutes later a StudySession row is written for user_id

Timers live for the lifetime of the process, capped at
``settings.MAX_TIMERS_PER_USER`` per user: creating one past the cap evicts the
user's oldest timer that is not running.  When a timer completes, the
registry records a StudySession through ``recorder`` on a fresh DB session;
recording failures are logged and never propagate into the event loop.
"""
from __future__ import annotations

import asyncio
import dataclasses
import logging
import uuid
from datetime import datetime, timezone
from typing import Awaitable, Callable, Dict, List, Optional, Set

from studysync.config import settings
from studysync.database import AsyncSessionLocal
from studysync.models.database_models import StudySession
from studysync.services.timer import (
    MODE_DURATIONS,
    CountdownTimer,
    Scheduler,
    TimerCompleted,
    TimerMode,
    TimerState,
)

logger = logging.getLogger(__name__)


@dataclasses.dataclass
class TimerEntry:
    id: str
    user_id: int
    mode: TimerMode
    timer: CountdownTimer
    created_at: datetime = dataclasses.field(
        default_factory=lambda: datetime.now(timezone.utc)
    )


def resolve_duration(mode: TimerMode, duration_seconds: Optional[int] = None) -> int:
    """Seconds for a preset mode, or the explicit duration for CUSTOM."""
    if mode == TimerMode.CUSTOM:
        if duration_seconds is None:
            raise ValueError("duration_seconds is required for custom mode")
        return duration_seconds
    return MODE_DURATIONS[mode]


async def record_study_session(user_id: int, mode: TimerMode, event: TimerCompleted) -> None:
    """Persist a finished interval as a StudySession row."""
    async with AsyncSessionLocal() as session:
        session.add(StudySession(
            user_id=user_id,
            duration=event.duration_minutes,
            subject=event.subject_label,
            type=mode.value,
        ))
        await session.commit()
    logger.info(
        "Recorded %d-minute %s session for user=%d (%r)",
        event.duration_minutes, mode.value, user_id, event.subject_label,
    )


Recorder = Callable[[int, TimerMode, TimerCompleted], Awaitable[None]]


class TimerRegistry:
    """Owns every live timer, keyed by id and scoped to the creating user."""

    _timers: Dict[str, TimerEntry] = {}
    _background: Set[asyncio.Task] = set()
    recorder: Recorder = staticmethod(record_study_session)

    @classmethod
    def create(
        cls,
        user_id: int,
        mode: TimerMode = TimerMode.POMODORO,
        duration_seconds: Optional[int] = None,
        subject: Optional[str] = None,
        scheduler: Optional[Scheduler] = None,
    ) -> TimerEntry:
        total = resolve_duration(mode, duration_seconds)
        cls._make_room(user_id)
        timer_id = uuid.uuid4().hex
        timer = CountdownTimer(
            total,
            scheduler=scheduler,
            tick_interval=settings.TIMER_TICK_SECONDS,
            subject=subject,
        )
        entry = TimerEntry(id=timer_id, user_id=user_id, mode=mode, timer=timer)
        timer.on_complete = lambda event: cls._on_complete(entry, event)
        cls._timers[timer_id] = entry
        logger.info("Created %s timer id=%s (%ds) for user=%d", mode.value, timer_id, total, user_id)
        return entry

    @classmethod
    def get(cls, timer_id: str, user_id: int) -> TimerEntry:
        """Raises KeyError if the timer does not exist or belongs to someone else."""
        entry = cls._timers.get(timer_id)
        if entry is None or entry.user_id != user_id:
            raise KeyError(timer_id)
        return entry

    @classmethod
    def list_for_user(cls, user_id: int) -> List[TimerEntry]:
        entries = [e for e in cls._timers.values() if e.user_id == user_id]
        return sorted(entries, key=lambda e: e.created_at)

    @classmethod
    def start(cls, timer_id: str, user_id: int) -> TimerEntry:
        entry = cls.get(timer_id, user_id)
        entry.timer.start()
        return entry

    @classmethod
    def pause(cls, timer_id: str, user_id: int) -> TimerEntry:
        entry = cls.get(timer_id, user_id)
        entry.timer.pause()
        return entry

    @classmethod
    def reset(cls, timer_id: str, user_id: int) -> TimerEntry:
        entry = cls.get(timer_id, user_id)
        entry.timer.reset()
        return entry

    @classmethod
    def set_mode(
        cls,
        timer_id: str,
        user_id: int,
        mode: TimerMode,
        duration_seconds: Optional[int] = None,
        subject: Optional[str] = None,
    ) -> TimerEntry:
        entry = cls.get(timer_id, user_id)
        entry.timer.set_duration(resolve_duration(mode, duration_seconds))
        entry.mode = mode
        if subject is not None:
            entry.timer.subject = subject
        return entry

    @classmethod
    def remove(cls, timer_id: str, user_id: int) -> None:
        entry = cls.get(timer_id, user_id)
        entry.timer.cancel()
        cls._timers.pop(timer_id, None)
        logger.info("Removed timer id=%s", timer_id)

    @classmethod
    def clear(cls) -> None:
        """Cancel and forget every timer (shutdown / tests)."""
        for entry in cls._timers.values():
            entry.timer.cancel()
        cls._timers.clear()

    @classmethod
    def _make_room(cls, user_id: int) -> None:
        """Evict the user's oldest non-running timers until one more fits."""
        limit = max(1, settings.MAX_TIMERS_PER_USER)
        entries = cls.list_for_user(user_id)
        excess = len(entries) - limit + 1
        if excess <= 0:
            return
        idle = [e for e in entries if e.timer.state != TimerState.RUNNING]
        if len(idle) < excess:
            raise ValueError(f"Too many running timers (limit {limit}); pause or delete one first")
        for entry in idle[:excess]:
            entry.timer.cancel()
            cls._timers.pop(entry.id, None)
            logger.info("Evicted %s timer id=%s for user=%d", entry.timer.state.value, entry.id, user_id)

    @classmethod
    def _on_complete(cls, entry: TimerEntry, event: TimerCompleted) -> None:
        async def _record() -> None:
            try:
                await cls.recorder(entry.user_id, entry.mode, event)
            except Exception as exc:
                logger.error(
                    "Failed to record study session for timer %s: %s", entry.id, exc, exc_info=True
                )

        task = asyncio.get_running_loop().create_task(_record())
        cls._background.add(task)
        task.add_done_callback(cls._background.discard)


# Module-level singleton instance
timer_registry = TimerRegistry
