"""Lifecycle owner tying the HTTP client, poller and store together."""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from services.aggregator import Aggregator, HistoryOrder
from services.dashboard import DashboardStore
from services.fetcher import FetchCycle
from services.poller import PollHandle, Poller
from settings import Settings, get_settings

logger = logging.getLogger(__name__)


class DashboardMonitor:
    """Explicit resource handle for one dashboard session.

    Whoever owns the dashboard lifetime calls ``start`` and later ``stop``;
    nothing here is shared at module level.
    """

    def __init__(
        self,
        store: DashboardStore,
        fetch_cycle: FetchCycle,
        client: httpx.AsyncClient,
        poll_interval_ms: int,
    ) -> None:
        self.store = store
        self.fetch_cycle = fetch_cycle
        self.poll_interval_ms = poll_interval_ms
        self._client = client
        self._poller = Poller(fetch_cycle.fetch)
        self._handle: Optional[PollHandle] = None
        self._closed = False

    @property
    def running(self) -> bool:
        return self._handle is not None and not self._handle.stopped

    async def start(self) -> None:
        if self._closed:
            raise RuntimeError("Monitor has been stopped; build a new one.")
        if self.running:
            return
        self._handle = self._poller.start(self.poll_interval_ms, self.store.apply)

    async def stop(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._handle is not None:
            await self._poller.stop(self._handle)
        await self._client.aclose()


def build_monitor(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> DashboardMonitor:
    """Factory that wires a monitor from settings."""
    settings = settings or get_settings()
    timeout = settings.fetch_timeout_ms / 1000
    client = httpx.AsyncClient(timeout=timeout, transport=transport)
    fetch_cycle = FetchCycle(
        client=client,
        url=settings.source_url,
        timeout=timeout,
        strict=settings.strict_validation,
    )
    store = DashboardStore(
        aggregator=Aggregator(order=HistoryOrder(settings.history_order)),
        selection_fallback=settings.selection_fallback,
    )
    logger.info("Monitoring %s", settings.source_url)
    return DashboardMonitor(
        store=store,
        fetch_cycle=fetch_cycle,
        client=client,
        poll_interval_ms=settings.poll_interval_ms,
    )
