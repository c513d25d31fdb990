"""Single-threaded timers for the playback engine."""

from __future__ import annotations

import asyncio
import heapq
import itertools
from collections.abc import Callable
from typing import Protocol


class TimerHandle:
    """A scheduled callback that can be cancelled before it runs."""

    def __init__(self, on_cancel: Callable[[], None] | None = None) -> None:
        self._cancelled = False
        self._fired = False
        self._on_cancel = on_cancel

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def active(self) -> bool:
        """Whether the callback is still waiting to run."""
        return not (self._cancelled or self._fired)

    def mark_fired(self) -> None:
        self._fired = True

    def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        if self._on_cancel is not None:
            self._on_cancel()


class Scheduler(Protocol):
    """Source of one-shot timers."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        """Run ``callback`` after ``delay`` seconds unless cancelled first."""
        ...


class ManualScheduler:
    """Virtual-clock scheduler driven explicitly by the caller.

    Nothing runs until :meth:`advance` or :meth:`run_until_idle` moves the
    clock, which makes timer behaviour deterministic.
    """

    def __init__(self) -> None:
        self.now = 0.0
        self._queue: list[tuple[float, int, TimerHandle, Callable[[], None]]] = []
        self._order = itertools.count()

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        handle = TimerHandle()
        due = self.now + max(0.0, delay)
        heapq.heappush(self._queue, (due, next(self._order), handle, callback))
        return handle

    @property
    def pending(self) -> int:
        """Number of timers that are scheduled and not cancelled."""
        return sum(1 for _, _, handle, _ in self._queue if handle.active)

    def next_due(self) -> float | None:
        """Clock time of the earliest live timer, if any."""
        self._drop_cancelled()
        return self._queue[0][0] if self._queue else None

    def advance(self, seconds: float) -> int:
        """Move the clock forward, running every timer that falls due.

        Timers scheduled by callbacks run too if they fall inside the window.

        Returns:
            Number of callbacks run.
        """
        return self._run_until(self.now + seconds)

    def _run_until(self, target: float) -> int:
        ran = 0
        while True:
            self._drop_cancelled()
            if not self._queue or self._queue[0][0] > target:
                break
            due, _, handle, callback = heapq.heappop(self._queue)
            self.now = max(self.now, due)
            handle.mark_fired()
            callback()
            ran += 1
        self.now = target
        return ran

    def run_until_idle(self, limit: float = 3600.0) -> int:
        """Run timers in order until none remain or ``limit`` seconds pass."""
        deadline = self.now + limit
        ran = 0
        while (due := self.next_due()) is not None and due <= deadline:
            ran += self._run_until(due)
        return ran

    def _drop_cancelled(self) -> None:
        while self._queue and self._queue[0][2].cancelled:
            heapq.heappop(self._queue)


class AsyncioScheduler:
    """Scheduler backed by an asyncio event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        handle = TimerHandle()

        def fire() -> None:
            handle.mark_fired()
            callback()

        timer = self.loop.call_later(max(0.0, delay), fire)
        handle._on_cancel = timer.cancel
        return handle
