"""Background risk tick scheduler.

APScheduler-based periodic job that re-evaluates the active user's risk
level. The job is a coroutine, so it runs on the application's event loop
and never overlaps an HTTP mutation of the engine.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from dosewatch.core.dosage.engine import DosageEngine
from dosewatch.logging_config import get_logger

logger = get_logger(__name__)

TICK_JOB_ID = "risk_tick"


async def run_risk_tick(engine: DosageEngine) -> None:
    """Recompute the active user's derived dosage state.

    Errors are logged and swallowed so one bad tick never stops the job.
    """
    try:
        view = engine.tick()
    except Exception:
        logger.error("Unexpected error in risk tick", exc_info=True)
        return

    if view.active:
        logger.debug(
            "Risk tick",
            user_id=view.user.id,
            risk_level=view.risk_level.value,
            time_remaining_ms=view.time_remaining_ms,
        )


class TickScheduler:
    """Cancellable periodic tick bound to one engine's lifetime."""

    def __init__(self, engine: DosageEngine, interval_seconds: int = 1):
        self._engine = engine
        self._interval_seconds = interval_seconds
        self._scheduler: AsyncIOScheduler | None = None

    @property
    def running(self) -> bool:
        return self._scheduler is not None

    def start(self) -> AsyncIOScheduler:
        """Start the tick job. Must be called with an event loop running."""
        if self._scheduler is not None:
            logger.warning("Tick scheduler already running")
            return self._scheduler

        scheduler = AsyncIOScheduler()
        scheduler.add_job(
            run_risk_tick,
            trigger=IntervalTrigger(seconds=self._interval_seconds),
            args=[self._engine],
            id=TICK_JOB_ID,
            name="Dosage Risk Tick",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        scheduler.start()
        self._scheduler = scheduler

        logger.info(
            "Tick scheduler started",
            interval_seconds=self._interval_seconds,
        )
        return scheduler

    def stop(self) -> None:
        if self._scheduler is not None:
            self._scheduler.shutdown(wait=False)
            self._scheduler = None
            logger.info("Tick scheduler stopped")

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None, None]:
        """Run the tick for the duration of the ``async with`` block."""
        self.start()
        try:
            yield
        finally:
            self.stop()
