"""Job scheduler - runs the snapshot job and alert check on a daily cron.

Schedules (UTC):
    - Price snapshot job (settings.SNAPSHOT_JOB_HOUR:MINUTE, default 06:00)
    - Price alert check (settings.ALERT_JOB_HOUR:MINUTE, default 06:30)
    - One-shot snapshot catch-up at startup (settings.RUN_JOBS_ON_STARTUP)
"""

import logging
from datetime import datetime, timezone

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.date import DateTrigger

from config import settings
from services.alert_engine import AlertEngine
from services.snapshot_job import SnapshotJobRunner

logger = logging.getLogger(__name__)

SNAPSHOT_JOB_ID = "price_snapshot"
ALERT_JOB_ID = "price_alert_check"
CATCH_UP_JOB_ID = "price_snapshot_catch_up"


class JobScheduler:
    """Owns the APScheduler instance that drives the batch runners.

    The runners carry their own single-flight guards, so the startup
    catch-up and the daily cron can fire together safely.
    """

    def __init__(
        self,
        snapshot_runner: SnapshotJobRunner,
        alert_engine: AlertEngine,
        scheduler: AsyncIOScheduler | None = None,
    ):
        self.snapshot_runner = snapshot_runner
        self.alert_engine = alert_engine
        self.scheduler = scheduler or AsyncIOScheduler(timezone=timezone.utc)

    def configure(self, run_on_startup: bool | None = None) -> None:
        """Register the cron jobs (and the optional startup catch-up)."""
        self.scheduler.add_job(
            self.run_snapshot_job,
            CronTrigger(
                hour=settings.SNAPSHOT_JOB_HOUR,
                minute=settings.SNAPSHOT_JOB_MINUTE,
                timezone=timezone.utc,
            ),
            id=SNAPSHOT_JOB_ID,
            name="Daily price snapshot",
            replace_existing=True,
            coalesce=True,
            max_instances=1,
        )
        logger.info(
            "Scheduled price snapshot: %02d:%02d UTC",
            settings.SNAPSHOT_JOB_HOUR, settings.SNAPSHOT_JOB_MINUTE,
        )

        self.scheduler.add_job(
            self.run_alert_check,
            CronTrigger(
                hour=settings.ALERT_JOB_HOUR,
                minute=settings.ALERT_JOB_MINUTE,
                timezone=timezone.utc,
            ),
            id=ALERT_JOB_ID,
            name="Price alert check",
            replace_existing=True,
            coalesce=True,
            max_instances=1,
        )
        logger.info(
            "Scheduled price alert check: %02d:%02d UTC",
            settings.ALERT_JOB_HOUR, settings.ALERT_JOB_MINUTE,
        )

        if run_on_startup is None:
            run_on_startup = settings.RUN_JOBS_ON_STARTUP
        if run_on_startup:
            self.scheduler.add_job(
                self.run_snapshot_job,
                DateTrigger(run_date=datetime.now(timezone.utc), timezone=timezone.utc),
                id=CATCH_UP_JOB_ID,
                name="Price snapshot catch-up",
                replace_existing=True,
            )
            logger.info("Scheduled startup price snapshot catch-up")

    def start(self) -> None:
        """Configure and start the scheduler. Must be called inside a running event loop."""
        self.configure()
        self.scheduler.start()
        logger.info("Job scheduler started")

    def stop(self) -> None:
        """Shut down the scheduler without waiting for running jobs."""
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
        logger.info("Job scheduler stopped")

    async def run_snapshot_job(self) -> None:
        """Scheduled entry point for the snapshot job. Never raises."""
        try:
            await self.snapshot_runner.run()
        except Exception:
            logger.error("Scheduled price snapshot failed", exc_info=True)

    async def run_alert_check(self) -> None:
        """Scheduled entry point for the alert check. Never raises."""
        try:
            await self.alert_engine.run()
        except Exception:
            logger.error("Scheduled price alert check failed", exc_info=True)
