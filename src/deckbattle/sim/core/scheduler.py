"""Delayed-callback scheduling for the battle engine.

The engine never sleeps or spawns threads.  Anything that should happen
"later" (the staggered enemy actions, the pause before the next player
turn) is handed to a ``Scheduler`` as a callback with a delay.  Hosts
plug in their own timer; ``ManualScheduler`` runs on a virtual clock and
is what tests and headless simulations use.
"""

from __future__ import annotations

import heapq
import itertools
from abc import ABC, abstractmethod
from typing import Callable


class ScheduledCall:
    """Handle for a pending callback.  ``cancel()`` prevents it from firing."""

    __slots__ = ("due_ms", "callback", "cancelled")

    def __init__(self, due_ms: int, callback: Callable[[], None]) -> None:
        self.due_ms = due_ms
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True

    def __repr__(self) -> str:
        state = "cancelled" if self.cancelled else "pending"
        return f"ScheduledCall(due_ms={self.due_ms}, {state})"


class Scheduler(ABC):
    """Fires callbacks after a delay, one at a time, in due order."""

    @abstractmethod
    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> ScheduledCall:
        """Run *callback* once, *delay_ms* milliseconds from now."""


class ManualScheduler(Scheduler):
    """Virtual-clock scheduler driven explicitly by the caller.

    Callbacks with equal due times fire in the order they were scheduled.
    Callbacks may schedule further callbacks; those are picked up by the
    same ``advance`` / ``run_until_idle`` call if they fall due in time.

    This is a plain Python class (not a Pydantic model) because it holds
    callables and a heap that should never be serialized.
    """

    def __init__(self) -> None:
        self._now_ms = 0
        self._heap: list[tuple[int, int, ScheduledCall]] = []
        self._counter = itertools.count()

    # -- scheduling ----------------------------------------------------------

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> ScheduledCall:
        if delay_ms < 0:
            raise ValueError(f"delay_ms must be >= 0, got {delay_ms}")
        call = ScheduledCall(self._now_ms + delay_ms, callback)
        heapq.heappush(self._heap, (call.due_ms, next(self._counter), call))
        return call

    # -- driving the clock ---------------------------------------------------

    def advance(self, ms: int) -> int:
        """Move the clock forward by *ms*, firing everything that falls due.

        Returns the number of callbacks fired.
        """
        if ms < 0:
            raise ValueError(f"cannot advance by a negative amount ({ms})")
        return self._run_until(self._now_ms + ms)

    def run_until_idle(self, max_calls: int = 10_000) -> int:
        """Fire callbacks until none remain.  Returns the number fired.

        *max_calls* guards against callbacks that reschedule themselves
        forever.
        """
        fired = 0
        while self._heap:
            if fired >= max_calls:
                raise RuntimeError(
                    f"scheduler still busy after {max_calls} callbacks"
                )
            due_ms, _, call = heapq.heappop(self._heap)
            self._now_ms = max(self._now_ms, due_ms)
            if call.cancelled:
                continue
            call.callback()
            fired += 1
        return fired

    def _run_until(self, target_ms: int) -> int:
        fired = 0
        while self._heap and self._heap[0][0] <= target_ms:
            due_ms, _, call = heapq.heappop(self._heap)
            self._now_ms = due_ms
            if call.cancelled:
                continue
            call.callback()
            fired += 1
        self._now_ms = target_ms
        return fired

    # -- queries -------------------------------------------------------------

    @property
    def now_ms(self) -> int:
        return self._now_ms

    @property
    def pending(self) -> int:
        return sum(1 for _, _, call in self._heap if not call.cancelled)

    @property
    def is_idle(self) -> bool:
        return self.pending == 0

    def __repr__(self) -> str:
        return f"ManualScheduler(now_ms={self._now_ms}, pending={self.pending})"
