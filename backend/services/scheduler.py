import logging
from typing import Awaitable, Callable

from apscheduler.schedulers.asyncio import AsyncIOScheduler

logger = logging.getLogger(__name__)


def _job_id(room_id: str) -> str:
    return f"tick_{room_id}"


class RoomTicker:
    """One APScheduler interval job per watched room."""

    def __init__(self, scheduler: AsyncIOScheduler | None = None):
        self.scheduler = scheduler or AsyncIOScheduler(timezone="UTC")

    def start(self) -> None:
        if not self.scheduler.running:
            self.scheduler.start()
            logger.info("Room ticker started")

    def shutdown(self) -> None:
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info("Room ticker shut down")

    def is_running(self, room_id: str) -> bool:
        return self.scheduler.get_job(_job_id(room_id)) is not None

    def interval_of(self, room_id: str) -> int | None:
        job = self.scheduler.get_job(_job_id(room_id))
        if job is None:
            return None
        return int(job.trigger.interval.total_seconds())

    def ensure(self, room_id: str, interval_sec: int, func: Callable[[str], Awaitable[None]]) -> None:
        """Start the room's job, or move it to a new interval if it changed."""
        current = self.interval_of(room_id)
        if current == interval_sec:
            return
        if current is not None:
            self.scheduler.reschedule_job(_job_id(room_id), trigger="interval", seconds=interval_sec)
            logger.info(f"Ticker for room {room_id} rescheduled to every {interval_sec}s")
            return
        self.scheduler.add_job(
            func, "interval",
            seconds=interval_sec,
            args=[room_id],
            id=_job_id(room_id),
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        logger.info(f"Ticker for room {room_id} started (every {interval_sec}s)")

    def stop(self, room_id: str) -> None:
        if self.is_running(room_id):
            self.scheduler.remove_job(_job_id(room_id))
            logger.info(f"Ticker for room {room_id} stopped")
