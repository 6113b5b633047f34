"""Fixed-interval scheduling of fetch cycles on the running event loop."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Set

from services.fetcher import FetchResult

logger = logging.getLogger(__name__)

FetchFn = Callable[[int], Awaitable[FetchResult]]
ResultCallback = Callable[[FetchResult], None]


class PollHandle:
    """Owns the timer task and in-flight cycles of one polling session."""

    def __init__(self, interval: float) -> None:
        self.interval = interval
        self.stopped = False
        self.sequence = 0
        self._timer: Optional[asyncio.Task[None]] = None
        self._in_flight: Set[asyncio.Task[None]] = set()

    @property
    def in_flight(self) -> int:
        return len(self._in_flight)

    def next_sequence(self) -> int:
        self.sequence += 1
        return self.sequence

    async def stop(self) -> None:
        """Stop polling; no result callback runs once this is entered."""
        if self.stopped:
            return
        self.stopped = True

        tasks = list(self._in_flight)
        if self._timer is not None:
            tasks.append(self._timer)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._in_flight.clear()
        logger.info("Polling stopped", extra={"sequence": self.sequence})


class Poller:
    """Runs ``fetch`` immediately and then every interval until stopped.

    Each tick runs as its own task, so a slow request never delays the next
    tick. Every result is handed to ``on_result`` as it arrives; ordering
    between overlapping ticks is resolved by the receiver using
    ``FetchResult.sequence``.
    """

    def __init__(self, fetch: FetchFn) -> None:
        self._fetch = fetch

    def start(self, interval_ms: int, on_result: ResultCallback) -> PollHandle:
        if interval_ms <= 0:
            raise ValueError("Poll interval must be positive.")
        handle = PollHandle(interval=interval_ms / 1000)
        handle._timer = asyncio.create_task(self._run(handle, on_result))
        logger.info("Polling started every %sms", interval_ms)
        return handle

    async def stop(self, handle: PollHandle) -> None:
        await handle.stop()

    async def _run(self, handle: PollHandle, on_result: ResultCallback) -> None:
        while not handle.stopped:
            self._launch(handle, on_result)
            await asyncio.sleep(handle.interval)

    def _launch(self, handle: PollHandle, on_result: ResultCallback) -> None:
        sequence = handle.next_sequence()
        task = asyncio.create_task(self._cycle(handle, sequence, on_result))
        handle._in_flight.add(task)
        task.add_done_callback(handle._in_flight.discard)

    async def _cycle(self, handle: PollHandle, sequence: int, on_result: ResultCallback) -> None:
        try:
            result = await self._fetch(sequence)
        except Exception:  # pragma: no cover - fetch cycles report errors in-band
            logger.exception("Fetch cycle raised", extra={"sequence": sequence})
            return
        if handle.stopped:
            logger.info("Discarding result that arrived after stop", extra={"sequence": sequence})
            return
        try:
            on_result(result)
        except Exception:
            logger.exception("Result handler failed", extra={"sequence": sequence})
