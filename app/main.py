from __future__ import annotations
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, Optional

from fastapi import FastAPI

from app.api import router
from logging_config import configure_logging
from services.monitor import DashboardMonitor, build_monitor

MonitorFactory = Callable[[], DashboardMonitor]


def create_app(monitor_factory: Optional[MonitorFactory] = None) -> FastAPI:
    configure_logging()
    factory = monitor_factory or build_monitor

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        monitor = factory()
        app.state.monitor = monitor
        await monitor.start()
        try:
            yield
        finally:
            await monitor.stop()

    app = FastAPI(
        title="AquaGuard Monitor",
        description="Polls water-quality readings and serves per-location dashboard projections.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.include_router(router)
    return app

app = create_app()
