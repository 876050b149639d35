"""Background job that expires offers past their response deadline."""

import logging
from typing import Any

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.exc import SQLAlchemyError

from placement_portal.core.config import settings
from placement_portal.core.storage import Database
from placement_portal.services.offer_service import OfferService

logger = logging.getLogger(__name__)

OFFER_EXPIRY_JOB_ID = "expire_overdue_offers"


class OfferExpiryScheduler:
    """Service owning the periodic offer-expiry sweep."""

    _instance: "OfferExpiryScheduler | None" = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return
        self._initialized = True
        self._scheduler: AsyncIOScheduler | None = None
        self._database: Database | None = None
        self.last_run_expired: int | None = None

    @property
    def scheduler(self) -> AsyncIOScheduler | None:
        return self._scheduler

    async def start(self, database: Database, interval_minutes: int | None = None):
        """Start the scheduler and register the sweep."""
        if self._scheduler is not None and self._scheduler.running:
            logger.info("Offer expiry scheduler already running")
            return

        self._database = database
        self._scheduler = AsyncIOScheduler(timezone="UTC")
        self._scheduler.add_job(
            self.run_once,
            trigger=IntervalTrigger(
                minutes=interval_minutes or settings.offer_expiry_check_minutes
            ),
            id=OFFER_EXPIRY_JOB_ID,
            replace_existing=True,
            coalesce=True,
            max_instances=1,
        )
        self._scheduler.start()
        logger.info(
            f"Offer expiry scheduler started, every "
            f"{interval_minutes or settings.offer_expiry_check_minutes} minute(s)"
        )

    async def stop(self):
        """Stop the scheduler."""
        if self._scheduler is not None:
            self._scheduler.shutdown(wait=False)
            self._scheduler = None
            logger.info("Offer expiry scheduler stopped")

    async def run_once(self) -> int:
        """Expire overdue offers in a fresh session; returns how many."""
        if self._database is None:
            logger.warning("Offer expiry scheduler has no database")
            return 0
        try:
            async with self._database.session() as session:
                expired = await OfferService(session).expire_overdue()
        except SQLAlchemyError as e:
            logger.error(f"Offer expiry sweep failed: {e}")
            return 0
        self.last_run_expired = expired
        return expired

    def get_status(self) -> dict[str, Any]:
        """Get scheduler status."""
        if self._scheduler is None:
            return {"scheduler_running": False, "jobs_count": 0}

        job = self._scheduler.get_job(OFFER_EXPIRY_JOB_ID)
        return {
            "scheduler_running": self._scheduler.running,
            "jobs_count": len(self._scheduler.get_jobs()),
            "next_scheduled_run": job.next_run_time if job else None,
            "last_run_expired": self.last_run_expired,
        }


# Global scheduler instance
offer_expiry_scheduler = OfferExpiryScheduler()
