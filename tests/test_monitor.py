from __future__ import annotations

import asyncio
import dataclasses

import httpx
import pytest

from services.aggregator import HistoryOrder
from services.monitor import DashboardMonitor, build_monitor
from settings import get_settings

PAYLOAD = [
    {"DormName": "North", "timestamp": "2024-05-01T08:00:00Z", "pH": 7.0, "temperature": 24, "ORP": 450, "quality": "GOOD"},
    {"DormName": "South", "timestamp": "2024-05-02T08:00:00Z", "pH": 8.9, "temperature": 31, "ORP": 390, "quality": "BAD"},
    {"DormName": "North", "timestamp": "2024-05-02T08:00:00Z", "pH": 7.3, "temperature": 25, "ORP": 460, "quality": "GOOD"},
]


def _settings(**overrides):
    base = dataclasses.replace(
        get_settings(),
        source_url="https://sensors.example.test/items",
        poll_interval_ms=60000,
        fetch_timeout_ms=1000,
    )
    return dataclasses.replace(base, **overrides)


async def _wait_until(predicate, timeout: float = 2.0) -> None:
    async def poll() -> None:
        while not predicate():
            await asyncio.sleep(0.01)

    await asyncio.wait_for(poll(), timeout=timeout)


def test_monitor_polls_into_store() -> None:
    requests: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(str(request.url))
        return httpx.Response(200, json=PAYLOAD)

    async def scenario() -> DashboardMonitor:
        monitor = build_monitor(_settings(), transport=httpx.MockTransport(handler))
        await monitor.start()
        assert monitor.running
        await _wait_until(lambda: monitor.store.has_data)
        await monitor.stop()
        return monitor

    monitor = asyncio.run(scenario())

    assert requests == ["https://sensors.example.test/items"]
    assert monitor.running is False
    store = monitor.store
    assert store.locations() == ["North", "South"]
    assert store.history("North")[0].ph == 7.3
    assert store.selected_detail().location_name == "North"
    assert store.applied_sequence == 1


def test_monitor_keeps_polling_through_failures() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, json={"message": "Service Unavailable"})

    async def scenario() -> DashboardMonitor:
        monitor = build_monitor(_settings(poll_interval_ms=10), transport=httpx.MockTransport(handler))
        await monitor.start()
        await _wait_until(lambda: monitor.store.last_error is not None)
        await monitor.stop()
        return monitor

    monitor = asyncio.run(scenario())

    assert monitor.store.has_data is False
    assert monitor.store.last_error.reason == "http_status"


def test_build_monitor_applies_policies() -> None:
    async def scenario() -> DashboardMonitor:
        monitor = build_monitor(
            _settings(history_order="source", selection_fallback=False, strict_validation=True),
            transport=httpx.MockTransport(lambda request: httpx.Response(200, json=[])),
        )
        await monitor.stop()
        return monitor

    monitor = asyncio.run(scenario())

    assert monitor.store.aggregator.order is HistoryOrder.source
    assert monitor.store.selection_fallback is False
    assert monitor.fetch_cycle.strict is True
    assert monitor.fetch_cycle.timeout == 1.0
    assert monitor.poll_interval_ms == 60000


def test_monitor_cannot_restart_after_stop() -> None:
    async def scenario() -> DashboardMonitor:
        monitor = build_monitor(
            _settings(),
            transport=httpx.MockTransport(lambda request: httpx.Response(200, json=PAYLOAD)),
        )
        await monitor.start()
        await monitor.stop()
        await monitor.stop()
        with pytest.raises(RuntimeError):
            await monitor.start()
        return monitor

    monitor = asyncio.run(scenario())

    assert monitor.running is False
