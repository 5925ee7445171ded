"""
Countdown timer for study / break intervals.

A ``CountdownTimer`` owns a fixed total duration and counts ``remaining``
down by one second per tick while running.  Ticks are delivered by a
``Scheduler``: in the server that is ``AsyncioScheduler`` (``loop.call_later``);
tests drive the same state machine with a virtual clock.

States
------
    IDLE       remaining == total, not running
    RUNNING    ticking
    PAUSED     0 < remaining < total, not running
    COMPLETED  remaining == 0; terminal until start()/reset()/set_duration()

At most one tick callback is pending per timer, and pause/reset/set_duration
cancel it before they return.
"""
from __future__ import annotations

import asyncio
import dataclasses
import enum
import logging
from typing import Callable, Optional, Protocol

from studysync.utils.helpers import format_countdown

logger = logging.getLogger(__name__)


class TimerState(str, enum.Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"


class TimerMode(str, enum.Enum):
    POMODORO = "pomodoro"
    SHORT = "short"
    LONG = "long"
    CUSTOM = "custom"


# Preset durations in seconds
MODE_DURATIONS = {
    TimerMode.POMODORO: 25 * 60,
    TimerMode.SHORT: 5 * 60,
    TimerMode.LONG: 15 * 60,
}

DEFAULT_SUBJECT_LABEL = "General Study"


@dataclasses.dataclass(frozen=True)
class TimerCompleted:
    """Emitted once when a timer reaches zero while running."""

    duration_minutes: int
    subject_label: str
    total_seconds: int


class ScheduledCall(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Anything that can run ``callback`` once after ``delay`` seconds."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledCall: ...


class AsyncioScheduler:
    """Schedules ticks on an asyncio event loop."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay, callback)


class CountdownTimer:
    """
    Fixed-duration countdown with start / pause / reset and a completion signal.

    Args:
        total_seconds: Interval length; must be positive.
        scheduler:     Delivers ticks.  Defaults to the running asyncio loop.
        tick_interval: Seconds between ticks (1.0 in production).
        subject:       Label passed along in the completion event.
        on_complete:   Called with a ``TimerCompleted`` exactly once per completion.
    """

    def __init__(
        self,
        total_seconds: int,
        scheduler: Optional[Scheduler] = None,
        tick_interval: float = 1.0,
        subject: Optional[str] = None,
        on_complete: Optional[Callable[[TimerCompleted], None]] = None,
    ) -> None:
        _check_duration(total_seconds)
        self._total = total_seconds
        self._remaining = total_seconds
        self._running = False
        self._completed = False
        self._pending: Optional[ScheduledCall] = None
        self._scheduler = scheduler or AsyncioScheduler()
        self._tick_interval = tick_interval
        self.subject = subject
        self.on_complete = on_complete

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def total_duration(self) -> int:
        return self._total

    @property
    def remaining(self) -> int:
        return self._remaining

    @property
    def running(self) -> bool:
        return self._running

    @property
    def completed(self) -> bool:
        return self._completed

    @property
    def state(self) -> TimerState:
        if self._running:
            return TimerState.RUNNING
        if self._completed:
            return TimerState.COMPLETED
        if self._remaining == self._total:
            return TimerState.IDLE
        return TimerState.PAUSED

    @property
    def remaining_formatted(self) -> str:
        return format_countdown(self._remaining)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Begin or resume counting down.  No-op while running or at zero."""
        if self._running or self._remaining == 0:
            return
        self._running = True
        self._completed = False
        self._schedule_tick()
        logger.debug("Timer started with %ds remaining", self._remaining)

    def pause(self) -> None:
        """Stop counting down, keeping ``remaining`` as is."""
        if not self._running:
            return
        self._running = False
        self._cancel_tick()
        logger.debug("Timer paused at %ds", self._remaining)

    def reset(self) -> None:
        """Return to IDLE with the full duration."""
        self._cancel_tick()
        self._running = False
        self._completed = False
        self._remaining = self._total

    def set_duration(self, total_seconds: int) -> None:
        """Mode switch: adopt a new total and force IDLE."""
        _check_duration(total_seconds)
        self._total = total_seconds
        self.reset()

    def cancel(self) -> None:
        """Drop any pending tick.  Used when the timer is discarded."""
        self._cancel_tick()
        self._running = False

    # ------------------------------------------------------------------
    # Ticking
    # ------------------------------------------------------------------

    def _schedule_tick(self) -> None:
        self._cancel_tick()
        self._pending = self._scheduler.call_later(self._tick_interval, self._tick)

    def _cancel_tick(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _tick(self) -> None:
        self._pending = None
        if not self._running:
            return

        self._remaining = max(0, self._remaining - 1)
        if self._remaining > 0:
            self._schedule_tick()
            return

        self._running = False
        self._completed = True
        logger.info("Timer completed (%ds, subject=%r)", self._total, self.subject)
        self._emit_completed()

    def _emit_completed(self) -> None:
        if self.on_complete is None:
            return
        event = TimerCompleted(
            duration_minutes=max(1, round(self._total / 60)),
            subject_label=self.subject or DEFAULT_SUBJECT_LABEL,
            total_seconds=self._total,
        )
        try:
            self.on_complete(event)
        except Exception as exc:
            logger.error("Timer completion listener failed: %s", exc, exc_info=True)


def _check_duration(total_seconds: int) -> None:
    if isinstance(total_seconds, bool) or not isinstance(total_seconds, int) or total_seconds <= 0:
        raise ValueError(f"Timer duration must be a positive number of seconds, got {total_seconds!r}")
