"""Rolling transfer-rate sampling.

A sampler runs as one asyncio task per run. Each tick divides the growth of
a cumulative byte counter by the elapsed time since the previous tick, and
then moves the baseline forward.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager

from dropctl.uploaders.constants import SAMPLE_INTERVAL

logger = logging.getLogger(__name__)

ByteCounter = Callable[[], int]
Clock = Callable[[], float]


class ThroughputSampler:
    """Periodically derives bytes/second from a cumulative counter."""

    def __init__(
        self,
        interval: float = SAMPLE_INTERVAL,
        *,
        clock: Clock = time.monotonic,
    ) -> None:
        self.interval = interval
        self._clock = clock
        self._counter: ByteCounter | None = None
        self._task: asyncio.Task[None] | None = None
        self._last_bytes = 0
        self._last_time = 0.0
        self._rate = 0.0

    @property
    def rate(self) -> float:
        """Most recent sampled rate in bytes per second."""
        return self._rate

    @property
    def active(self) -> bool:
        return self._task is not None

    def reset_baseline(self, counter: ByteCounter) -> None:
        """Attach a counter and take the first baseline from it."""
        self._counter = counter
        self._last_bytes = counter()
        self._last_time = self._clock()

    def sample(self) -> float:
        """Take one sample and move the baseline forward.

        The rate is only replaced when time has advanced; it is never negative,
        even if the counter went backwards.
        """
        if self._counter is None:
            return self._rate
        now = self._clock()
        current = self._counter()
        elapsed = now - self._last_time
        if elapsed > 0:
            self._rate = max(0.0, (current - self._last_bytes) / elapsed)
        self._last_bytes = current
        self._last_time = now
        return self._rate

    def start(self, counter: ByteCounter) -> None:
        """Begin sampling on the running event loop; no-op if already active."""
        if self._task is not None:
            return
        self.reset_baseline(counter)
        self._task = asyncio.get_running_loop().create_task(self._loop())

    async def stop(self) -> None:
        """Cancel the sampling task and zero the displayed rate."""
        task, self._task = self._task, None
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._rate = 0.0

    @asynccontextmanager
    async def sampling(self, counter: ByteCounter) -> AsyncIterator["ThroughputSampler"]:
        """Sample for the duration of the block."""
        self.start(counter)
        try:
            yield self
        finally:
            await self.stop()

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            rate = self.sample()
            logger.debug("Throughput %.0f B/s", rate)
