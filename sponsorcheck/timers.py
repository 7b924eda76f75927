"""
Timer scheduling for the page monitor.

The monitor never sleeps; it asks a scheduler to run a callback later and
keeps the returned handle so the timer can be cancelled. Two schedulers are
provided: ManualScheduler drives a virtual clock (tests, replaying recorded
sessions) and AsyncioScheduler binds to a running asyncio event loop.
"""

import asyncio
import heapq
import itertools
from typing import Any, Callable, List, Optional, Protocol, Tuple


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def time(self) -> float: ...

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> TimerHandle: ...


class ManualTimer:
    """Handle returned by ManualScheduler.call_later."""

    def __init__(self, when: float, callback: Callable[..., Any], args: Tuple[Any, ...]):
        self.when = when
        self.callback = callback
        self.args = args
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True

    def __repr__(self) -> str:
        state = "cancelled" if self.cancelled else "pending"
        return f"<ManualTimer when={self.when:.3f} {state} {getattr(self.callback, '__name__', self.callback)}>"


class ManualScheduler:
    """
    Deterministic scheduler with a virtual clock.

    Time only moves when advance() is called. Timers due within the advanced
    span fire in due-time order, ties in scheduling order, and timers
    scheduled by a firing callback run in the same advance() if they fall
    inside the span.
    """

    def __init__(self, start: float = 0.0):
        self._now = start
        self._queue: List[Tuple[float, int, ManualTimer]] = []
        self._seq = itertools.count()

    def time(self) -> float:
        return self._now

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> ManualTimer:
        timer = ManualTimer(self._now + max(0.0, delay), callback, args)
        heapq.heappush(self._queue, (timer.when, next(self._seq), timer))
        return timer

    @property
    def pending(self) -> List[ManualTimer]:
        """Pending (not cancelled) timers in firing order."""
        return [t for _, _, t in sorted(self._queue) if not t.cancelled]

    def advance(self, seconds: float) -> int:
        """Move the clock forward, firing due timers. Returns how many fired."""
        target = self._now + seconds
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            when, _, timer = heapq.heappop(self._queue)
            if timer.cancelled:
                continue
            self._now = when
            timer.callback(*timer.args)
            fired += 1
        self._now = target
        return fired


class AsyncioScheduler:
    """Scheduler backed by an asyncio event loop."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop or asyncio.get_running_loop()

    def time(self) -> float:
        return self._loop.time()

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> asyncio.TimerHandle:
        return self._loop.call_later(delay, callback, *args)
