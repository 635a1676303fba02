# src/planstore/storage/autosave.py

from __future__ import annotations

"""
Debounced auto-save.

One pending timer per scheduler. Every mark_dirty() cancels the previous timer
and arms a new one, so a burst of mutations ends in a single flush once the
store has been quiet for `quiet_period` seconds.

The timer itself comes from a TimerFactory so the host decides where the
flush runs:
- ThreadingTimerFactory: a daemon thread per armed timer (default),
- LoopTimerFactory: an asyncio event loop,
- tests: a manual clock.
"""

import asyncio
import logging
import threading
from collections.abc import Callable

from ..core.errors import FlushError
from ..core.ports import TimerFactory, TimerHandle

logger = logging.getLogger(__name__)

DEFAULT_QUIET_PERIOD = 3.0


class ThreadingTimerFactory:
    def __call__(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        timer.start()
        return timer


class LoopTimerFactory:
    """
    Arms timers on an asyncio loop.

    Safe to call from the loop thread or from any other thread.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop) -> None:
        self._loop = loop

    def __call__(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        if running is self._loop:
            return self._loop.call_later(delay, callback)

        handle = _ThreadsafeLoopTimer(self._loop, delay, callback)
        self._loop.call_soon_threadsafe(handle.arm)
        return handle


class _ThreadsafeLoopTimer:
    def __init__(self, loop: asyncio.AbstractEventLoop, delay: float, callback: Callable[[], None]) -> None:
        self._loop = loop
        self._delay = delay
        self._callback = callback
        self._handle: asyncio.TimerHandle | None = None
        self._cancelled = False

    def arm(self) -> None:
        if not self._cancelled:
            self._handle = self._loop.call_later(self._delay, self._callback)

    def cancel(self) -> None:
        self._cancelled = True
        if self._handle is not None:
            self._loop.call_soon_threadsafe(self._handle.cancel)


class AutoSaveScheduler:
    """
    Single-slot deferred flush.

    Clean -> mark_dirty -> Dirty&Armed -> quiet period -> flush -> Clean
    A failed flush leaves the scheduler Dirty and unarmed; the next
    mark_dirty() or force_flush() retries.
    """

    def __init__(
        self,
        flush: Callable[[], None],
        *,
        quiet_period: float = DEFAULT_QUIET_PERIOD,
        timer_factory: TimerFactory | None = None,
        name: str = "store",
        log: logging.Logger | None = None,
    ) -> None:
        self._flush = flush
        self._quiet_period = max(0.0, float(quiet_period))
        self._timer_factory: TimerFactory = timer_factory or ThreadingTimerFactory()
        self._name = name
        self._log = log or logger

        self._timer: TimerHandle | None = None
        self._generation = 0
        self.dirty = False

    @property
    def armed(self) -> bool:
        return self._timer is not None

    @property
    def quiet_period(self) -> float:
        return self._quiet_period

    def mark_dirty(self) -> None:
        self.dirty = True
        self.cancel()
        generation = self._generation
        self._timer = self._timer_factory(self._quiet_period, lambda: self._on_timer(generation))

    def cancel(self) -> None:
        """Drop the pending timer (if any) without flushing."""
        self._generation += 1
        timer, self._timer = self._timer, None
        if timer is not None:
            timer.cancel()

    def force_flush(self) -> bool:
        """Cancel the pending timer and flush now, dirty or not."""
        self.cancel()
        return self._run_flush()

    def _on_timer(self, generation: int) -> None:
        # A timer that was already replaced may still fire if cancel() lost the race.
        if generation != self._generation:
            return
        self._timer = None
        if self.dirty:
            self._run_flush()

    def _run_flush(self) -> bool:
        generation = self._generation
        try:
            self._flush()
        except Exception as e:
            err = FlushError(f"Auto-save flush failed for {self._name}: {e!r}")
            self._log.error("%s", err, exc_info=e)
            return False
        if generation == self._generation:
            # No mutation slipped in while flushing.
            self.dirty = False
        self._log.debug("Auto-save completed for %s", self._name)
        return True
