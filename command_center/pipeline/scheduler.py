"""
Timed callback schedulers for the readiness state machine.

Both schedulers expose the same two methods, ``now()`` and
``call_later(delay, callback)``, and return handles with a ``cancel()``
method.  Everything runs on one thread: callbacks fire from the host's event
loop (asyncio) or from explicit ``run_pending()`` calls (Streamlit reruns,
tests driving a fake clock).
"""

import asyncio
import heapq
import itertools
import logging
import time
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


class TimerHandle:
    """A scheduled callback owned by a ``ManualScheduler``."""

    __slots__ = ('deadline', 'seq', 'callback', 'cancelled')

    def __init__(self, deadline: float, seq: int, callback: Callable[[], None]):
        self.deadline = deadline
        self.seq = seq
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True

    def __lt__(self, other):
        return (self.deadline, self.seq) < (other.deadline, other.seq)


class ManualScheduler:
    """Fires due callbacks whenever ``run_pending`` is called.

    The clock is injectable so tests can advance time without sleeping.
    Callbacks fire in deadline order; equal deadlines keep scheduling order.

    Args:
        clock: Zero-argument callable returning the current time in seconds.
            Defaults to ``time.monotonic``.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self.clock = clock
        self._queue: List[TimerHandle] = []
        self._counter = itertools.count()

    def now(self) -> float:
        return self.clock()

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        handle = TimerHandle(self.now() + max(0.0, delay), next(self._counter), callback)
        heapq.heappush(self._queue, handle)
        return handle

    def run_pending(self) -> int:
        """Run every callback whose deadline has passed.

        Returns:
            Number of callbacks fired (cancelled handles are not counted).
        """
        fired = 0
        now = self.now()
        while self._queue and self._queue[0].deadline <= now:
            handle = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            handle.callback()
            fired += 1
        return fired

    def next_deadline(self) -> Optional[float]:
        """Deadline of the earliest live callback, or None when idle."""
        # Drop cancelled handles sitting at the head of the queue
        while self._queue and self._queue[0].cancelled:
            heapq.heappop(self._queue)
        return self._queue[0].deadline if self._queue else None

    @property
    def pending(self) -> int:
        return sum(1 for h in self._queue if not h.cancelled)


class AsyncioScheduler:
    """Schedules callbacks on an asyncio event loop via ``call_later``."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self.loop = loop or asyncio.get_running_loop()

    def now(self) -> float:
        return self.loop.time()

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return self.loop.call_later(max(0.0, delay), callback)
