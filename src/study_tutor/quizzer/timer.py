"""Cancellable countdown driving the quickfire time limit."""

from __future__ import annotations

import threading
from typing import Callable, Optional, Protocol

WARNING_THRESHOLD = 10


class Cancellable(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Runs ``callback`` once after ``delay`` seconds."""

    def schedule(
        self, delay: float, callback: Callable[[], None]
    ) -> Cancellable: ...


class ThreadingScheduler:
    """Schedule callbacks on daemon :class:`threading.Timer` threads."""

    def schedule(
        self, delay: float, callback: Callable[[], None]
    ) -> threading.Timer:
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        timer.start()
        return timer


def format_clock(seconds: int) -> str:
    """Render whole seconds as ``MM:SS``."""
    seconds = max(0, int(seconds))
    minutes, secs = divmod(seconds, 60)
    return f"{minutes:02d}:{secs:02d}"


class Countdown:
    """Decrement ``remaining`` once per interval and expire exactly once.

    ``start`` chains one scheduled tick at a time through the scheduler.
    ``tick`` may also be called directly. After ``cancel`` or expiry further
    ticks are ignored.
    """

    def __init__(
        self,
        duration: int,
        on_expire: Callable[[], None],
        *,
        on_tick: Optional[Callable[[int], None]] = None,
        interval: float = 1.0,
        scheduler: Optional[Scheduler] = None,
    ) -> None:
        if duration < 1:
            raise ValueError("Countdown duration must be at least 1")
        self.duration = int(duration)
        self.interval = interval
        self._on_expire = on_expire
        self._on_tick = on_tick
        self._scheduler = scheduler or ThreadingScheduler()
        self._lock = threading.Lock()
        self._handle: Optional[Cancellable] = None
        self._remaining = self.duration
        self._started = False
        self._expired = False
        self._cancelled = False

    @property
    def remaining(self) -> int:
        return self._remaining

    @property
    def elapsed(self) -> int:
        return self.duration - self._remaining

    @property
    def expired(self) -> bool:
        return self._expired

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def is_warning(self) -> bool:
        return self._remaining <= WARNING_THRESHOLD

    def start(self) -> None:
        with self._lock:
            if self._started:
                raise RuntimeError("Countdown already started")
            if self._cancelled:
                raise RuntimeError("Countdown was cancelled")
            self._started = True
            self._schedule_next()

    def tick(self) -> None:
        with self._lock:
            if self._cancelled or self._expired:
                return
            self._remaining -= 1
            remaining = self._remaining
            fire = remaining <= 0
            if fire:
                self._expired = True
                self._handle = None
            elif self._started:
                self._schedule_next()
        if self._on_tick is not None:
            self._on_tick(remaining)
        if fire:
            self._on_expire()

    def cancel(self) -> None:
        with self._lock:
            self._cancelled = True
            handle, self._handle = self._handle, None
        if handle is not None:
            handle.cancel()

    def _schedule_next(self) -> None:
        self._handle = self._scheduler.schedule(self.interval, self.tick)
