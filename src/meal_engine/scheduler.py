"""In-process scheduling of the settlement sweep."""

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from meal_engine.services.settlement import SettlementService

logger = logging.getLogger(__name__)

SETTLEMENT_JOB_ID = "settlement_sweep"


class SchedulerManager:
    """Owns the APScheduler instance that runs periodic jobs."""

    def __init__(self) -> None:
        self.scheduler: AsyncIOScheduler | None = None

    def initialize(
        self, settlement: SettlementService, interval_minutes: int = 30
    ) -> None:
        if self.scheduler is not None:
            logger.warning("Scheduler already initialized")
            return
        self.scheduler = AsyncIOScheduler(
            timezone="UTC",
            job_defaults={
                "coalesce": True,
                "max_instances": 1,
                "misfire_grace_time": 600,
            },
        )
        self.scheduler.add_job(
            settlement.run,
            trigger=IntervalTrigger(minutes=interval_minutes, timezone="UTC"),
            id=SETTLEMENT_JOB_ID,
            name="Order settlement sweep",
            replace_existing=True,
        )
        logger.info("Settlement sweep scheduled every %s minutes", interval_minutes)

    def start(self) -> None:
        if self.scheduler is None:
            raise RuntimeError("Scheduler not initialized")
        if self.scheduler.running:
            logger.warning("Scheduler already running")
            return
        self.scheduler.start()
        logger.info("Scheduler started")

    def shutdown(self, wait: bool = True) -> None:
        if self.scheduler is None or not self.scheduler.running:
            return
        self.scheduler.shutdown(wait=wait)
        logger.info("Scheduler shut down")

    def get_jobs(self) -> list[dict[str, str]]:
        if self.scheduler is None:
            return []
        return [
            {"id": job.id, "name": job.name, "trigger": str(job.trigger)}
            for job in self.scheduler.get_jobs()
        ]
