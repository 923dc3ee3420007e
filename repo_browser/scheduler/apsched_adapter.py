"""APScheduler wrapper driving the periodic catalog sync."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable

import structlog
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.date import DateTrigger
from apscheduler.triggers.interval import IntervalTrigger

from ..config import ScheduleConfig, ScheduleType
from ..logging_conf import component_logger

SYNC_JOB_ID = "catalog::sync"
SORT_JOB_ID = "catalog::sort"


class APSchedulerAdapter:
    """Manage the APScheduler jobs: the periodic sync and deferred one-shot runs."""

    def __init__(self, logger: structlog.BoundLogger | None = None) -> None:
        self.scheduler = BackgroundScheduler()
        self.logger = logger or component_logger("scheduler")
        self.started = False

    def start(self) -> None:
        if not self.started:
            self.scheduler.start()
            self.started = True
            self.logger.info("apscheduler_started")

    def shutdown(self) -> None:
        if self.started:
            self.scheduler.shutdown(wait=False)
            self.started = False
            self.logger.info("apscheduler_stopped")

    def schedule_sync(
        self,
        schedule: ScheduleConfig,
        callback: Callable[[], object],
        run_now: bool = False,
    ) -> None:
        trigger = self._build_trigger(schedule)
        job_kwargs: dict = {}
        if run_now:
            job_kwargs["next_run_time"] = datetime.now(trigger.timezone)
        self.scheduler.add_job(
            callback,
            trigger=trigger,
            id=SYNC_JOB_ID,
            replace_existing=True,
            coalesce=True,
            max_instances=1,
            **job_kwargs,
        )
        self.logger.info("sync_scheduled", schedule=schedule.model_dump(mode="json"), run_now=run_now)

    def schedule_once(self, job_id: str, callback: Callable[[], object], delay_seconds: float) -> None:
        """Run ``callback`` once after ``delay_seconds``; rescheduling pushes the run back."""

        run_date = datetime.now(timezone.utc) + timedelta(seconds=max(0.0, delay_seconds))
        self.scheduler.add_job(
            callback,
            trigger=DateTrigger(run_date=run_date),
            id=job_id,
            replace_existing=True,
        )
        self.logger.debug("job_deferred", job_id=job_id, run_date=run_date.isoformat())

    def remove_sync(self) -> None:
        try:
            self.scheduler.remove_job(SYNC_JOB_ID)
        except Exception:  # noqa: BLE001
            self.logger.warning("job_remove_failed", job_id=SYNC_JOB_ID)

    def _build_trigger(self, schedule: ScheduleConfig):
        if schedule.type is ScheduleType.CRON:
            return CronTrigger.from_crontab(str(schedule.value))
        if schedule.type is ScheduleType.INTERVAL:
            if isinstance(schedule.value, (int, float)):
                return IntervalTrigger(seconds=float(schedule.value))
            if isinstance(schedule.value, dict):
                return IntervalTrigger(**schedule.value)
            raise ValueError("Interval schedule requires seconds or kwargs dict")
        raise ValueError(f"Unknown schedule type: {schedule.type}")


__all__ = ["APSchedulerAdapter", "SORT_JOB_ID", "SYNC_JOB_ID"]
