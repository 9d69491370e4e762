"""Token sync scheduler.

Runs the token sync cycle once at startup, then on a fixed interval,
and exposes a manual trigger for the refresh route and the CLI.

Only one cycle runs at a time. A scheduled tick that fires while a
cycle is in flight is skipped; a manual trigger waits for the running
cycle to finish and then runs a fresh one, so its caller always gets the
outcome of a cycle that started after the request.

The module also owns the process APScheduler instance the job runs on.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import structlog
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

if TYPE_CHECKING:
    from spotboard.data.models.token import TokenSyncResult

log = structlog.get_logger(__name__)

JOB_ID_TOKEN_SYNC = "token_sync"

# Seconds a late tick may still run; later ones are dropped
MISFIRE_GRACE_SECONDS = 30

_scheduler: AsyncIOScheduler | None = None


def get_scheduler() -> AsyncIOScheduler:
    """Get or create the process APScheduler instance (not started).

    Jobs default to a single instance with missed ticks coalesced, and
    run times are computed in UTC.
    """
    global _scheduler
    if _scheduler is None:
        _scheduler = AsyncIOScheduler(
            timezone=UTC,
            job_defaults={
                "coalesce": True,
                "max_instances": 1,
                "misfire_grace_time": MISFIRE_GRACE_SECONDS,
            },
        )
        log.debug("apscheduler_created", misfire_grace_seconds=MISFIRE_GRACE_SECONDS)
    return _scheduler


async def shutdown_scheduler() -> None:
    """Stop APScheduler, dropping any remaining jobs, and clear the instance."""
    global _scheduler
    if _scheduler is None:
        return
    if _scheduler.running:
        jobs = len(_scheduler.get_jobs())
        _scheduler.shutdown(wait=False)
        log.info("apscheduler_shutdown", remaining_jobs=jobs)
    _scheduler = None


class TokenSyncScheduler:
    """Schedules sync cycles and guards against overlapping runs.

    Attributes:
        interval_seconds: Seconds between scheduled cycles.
    """

    def __init__(
        self,
        run_cycle: Callable[[], Awaitable[TokenSyncResult]],
        interval_seconds: int = 60,
        scheduler: AsyncIOScheduler | None = None,
    ) -> None:
        """Initialize scheduler.

        Args:
            run_cycle: Coroutine function running one sync cycle.
            interval_seconds: Seconds between scheduled cycles (default: 60).
            scheduler: APScheduler instance (default: the process singleton).
        """
        self.interval_seconds = interval_seconds
        self._run_cycle = run_cycle
        self._scheduler = scheduler
        self._lock = asyncio.Lock()
        self._last_run_at: datetime | None = None
        self._last_result: TokenSyncResult | None = None
        self._last_error: str | None = None

    @property
    def scheduler(self) -> AsyncIOScheduler:
        """The APScheduler instance jobs are registered on."""
        if self._scheduler is None:
            self._scheduler = get_scheduler()
        return self._scheduler

    @property
    def in_progress(self) -> bool:
        """True while a cycle is running."""
        return self._lock.locked()

    async def start(self) -> None:
        """Register the interval job (first run immediately) and start APScheduler."""
        self.scheduler.add_job(
            self.run_scheduled,
            trigger=IntervalTrigger(seconds=self.interval_seconds),
            id=JOB_ID_TOKEN_SYNC,
            name="Token Sync",
            replace_existing=True,
            next_run_time=datetime.now(UTC),
            max_instances=1,
            coalesce=True,
        )
        if not self.scheduler.running:
            self.scheduler.start()

        log.info(
            "token_sync_scheduled",
            job_id=JOB_ID_TOKEN_SYNC,
            interval_seconds=self.interval_seconds,
        )

    async def stop(self) -> None:
        """Remove the interval job. Safe to call when not scheduled."""
        if self.scheduler.get_job(JOB_ID_TOKEN_SYNC):
            self.scheduler.remove_job(JOB_ID_TOKEN_SYNC)
            log.info("token_sync_unscheduled", job_id=JOB_ID_TOKEN_SYNC)

    async def run_scheduled(self) -> None:
        """Interval job body.

        Skips if a cycle is already running. Never raises, so a failed
        cycle does not stop later ticks.
        """
        if self._lock.locked():
            log.info("token_sync_skipped_in_progress")
            return

        async with self._lock:
            try:
                await self._execute(trigger="scheduled")
            except Exception as e:
                log.error("token_sync_scheduled_run_failed", error=str(e))

    async def trigger(self) -> TokenSyncResult:
        """Run a cycle on demand, waiting for any running cycle first.

        Returns:
            The cycle's TokenSyncResult.

        Raises:
            Exception: Whatever aborted the cycle.
        """
        log.info("token_sync_manual_trigger", waiting=self._lock.locked())
        async with self._lock:
            try:
                return await self._execute(trigger="manual")
            except Exception as e:
                log.error("token_sync_manual_run_failed", error=str(e))
                raise

    async def _execute(self, trigger: str) -> TokenSyncResult:
        self._last_run_at = datetime.now(UTC)
        try:
            result = await self._run_cycle()
        except Exception as e:
            self._last_error = f"{type(e).__name__}: {e}"
            raise

        self._last_result = result
        self._last_error = None
        log.info("token_sync_finished", trigger=trigger, status=result.status)
        return result

    def get_next_run_time(self) -> str | None:
        """Next scheduled run as an ISO string, or None if not scheduled."""
        job = self.scheduler.get_job(JOB_ID_TOKEN_SYNC)
        if job and job.next_run_time:
            return job.next_run_time.isoformat()
        return None

    def status(self) -> dict[str, Any]:
        """Scheduler state for health reporting."""
        return {
            "running": self.scheduler.running,
            "in_progress": self.in_progress,
            "interval_seconds": self.interval_seconds,
            "next_run": self.get_next_run_time() if self.scheduler.running else None,
            "last_run_at": self._last_run_at.isoformat() if self._last_run_at else None,
            "last_result": self._last_result.model_dump(mode="json")
            if self._last_result
            else None,
            "last_error": self._last_error,
        }
