"""DoseWatch FastAPI Application."""

import asyncio
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dosewatch.config import Settings, settings
from dosewatch.core.dosage.engine import DosageEngine
from dosewatch.logging_config import get_logger, setup_logging
from dosewatch.middleware import CorrelationIdMiddleware
from dosewatch.routers import dosage, health, users, voice
from dosewatch.routers import settings as settings_router
from dosewatch.services.notifier import RecentNotificationSink
from dosewatch.services.scheduler import TickScheduler
from dosewatch.services.store import MemoryStore, RedisStore, build_store

logger = get_logger(__name__)

APP_VERSION = "0.1.0"


def create_app(
    engine: DosageEngine | None = None,
    store: MemoryStore | RedisStore | None = None,
    notifier: RecentNotificationSink | None = None,
    config: Settings = settings,
) -> FastAPI:
    """Build the API around one dosage engine.

    Tests pass their own engine (with a fake clock) and collaborators;
    otherwise the store backend comes from ``config`` and the engine
    restores its persisted records at startup.
    """
    setup_logging(
        log_format=config.log_format,
        log_level=config.log_level,
        service_name=config.service_name,
    )

    store = store if store is not None else build_store(config)
    notifier = (
        notifier
        if notifier is not None
        else RecentNotificationSink(max_items=config.notification_buffer_size)
    )
    engine = engine if engine is not None else DosageEngine(store, notifier)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifespan handler."""
        # Store reads may block on Redis; keep them off the event loop
        await asyncio.to_thread(engine.restore)
        logger.info("DoseWatch API started", store_backend=config.store_backend)

        if config.tick_enabled and not config.testing:
            async with TickScheduler(engine, config.tick_interval_seconds).lifespan():
                yield
        else:
            logger.info("Risk tick disabled")
            yield

        await asyncio.to_thread(store.close)
        logger.info("DoseWatch API shutdown complete")

    app = FastAPI(
        title="DoseWatch API",
        description="Per-user dosage risk tracking API",
        version=APP_VERSION,
        lifespan=lifespan,
    )
    app.state.store = store
    app.state.notifier = notifier
    app.state.engine = engine

    # Middleware (order matters: first added = last executed)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(CorrelationIdMiddleware)

    app.include_router(health.router)
    app.include_router(dosage.router)
    app.include_router(users.router)
    app.include_router(settings_router.router)
    app.include_router(voice.router)

    @app.get("/")
    async def root() -> dict[str, Any]:
        """Root endpoint."""
        return {
            "name": "DoseWatch API",
            "version": APP_VERSION,
            "docs": "/docs",
        }

    return app


app = create_app()
