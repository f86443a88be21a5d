"""Tests for JobScheduler."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from services.scheduler import ALERT_JOB_ID, CATCH_UP_JOB_ID, SNAPSHOT_JOB_ID, JobScheduler


def _scheduler(**kwargs):
    snapshot_runner = MagicMock()
    snapshot_runner.run = AsyncMock(**kwargs)
    alert_engine = MagicMock()
    alert_engine.run = AsyncMock()
    return JobScheduler(snapshot_runner, alert_engine, scheduler=AsyncIOScheduler())


class TestConfigure:
    def test_registers_daily_jobs(self):
        scheduler = _scheduler()
        scheduler.configure(run_on_startup=False)

        job_ids = {job.id for job in scheduler.scheduler.get_jobs()}
        assert job_ids == {SNAPSHOT_JOB_ID, ALERT_JOB_ID}

    def test_startup_catch_up(self):
        scheduler = _scheduler()
        scheduler.configure(run_on_startup=True)

        assert scheduler.scheduler.get_job(CATCH_UP_JOB_ID) is not None

    def test_cron_times_from_settings(self, monkeypatch):
        monkeypatch.setattr("services.scheduler.settings.SNAPSHOT_JOB_HOUR", 4)
        monkeypatch.setattr("services.scheduler.settings.SNAPSHOT_JOB_MINUTE", 15)
        scheduler = _scheduler()
        scheduler.configure(run_on_startup=False)

        trigger = str(scheduler.scheduler.get_job(SNAPSHOT_JOB_ID).trigger)
        assert "hour='4'" in trigger
        assert "minute='15'" in trigger


class TestScheduledEntryPoints:
    def test_snapshot_job_runs_runner(self):
        scheduler = _scheduler()
        asyncio.run(scheduler.run_snapshot_job())
        scheduler.snapshot_runner.run.assert_awaited_once()

    def test_snapshot_job_never_raises(self):
        scheduler = _scheduler(side_effect=RuntimeError("db down"))
        asyncio.run(scheduler.run_snapshot_job())

    def test_alert_check_never_raises(self):
        scheduler = _scheduler()
        scheduler.alert_engine.run.side_effect = RuntimeError("db down")
        asyncio.run(scheduler.run_alert_check())
        scheduler.alert_engine.run.assert_awaited_once()

    def test_stop_when_not_started(self):
        scheduler = _scheduler()
        scheduler.stop()
