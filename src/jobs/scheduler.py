"""Background job scheduler for the assessment service.

This module provides a scheduler for maintenance tasks such as:
- Dropping completed sessions past their retention window
- Pruning expired rate limit windows

The scheduler uses APScheduler with AsyncIO support for non-blocking execution.
"""

import logging
from typing import Any, Callable, Optional

from apscheduler.executors.asyncio import AsyncIOExecutor
from apscheduler.jobstores.base import JobLookupError
from apscheduler.jobstores.memory import MemoryJobStore
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from src.modules.assessment.session_store import SessionStore
from src.modules.resilience import RateLimiter
from src.shared.feature_flags import FeatureFlagManager, FeatureFlags, get_feature_flags

logger = logging.getLogger(__name__)


class JobScheduler:
    """Background job scheduler.

    Built explicitly by whoever owns the services it maintains (the API
    lifespan, typically). All tasks run asynchronously on the event loop.

    Usage:
        scheduler = JobScheduler()
        scheduler.schedule_session_cleanup(registry.session_store, interval_minutes=15)
        scheduler.start()
        ...
        scheduler.shutdown()
    """

    def __init__(self, flags: Optional[FeatureFlagManager] = None):
        """Initialize the job scheduler.

        Args:
            flags: Feature flag manager (defaults to the shared manager)
        """
        self._scheduler: Optional[AsyncIOScheduler] = None
        self._is_running = False
        self._flags = flags or get_feature_flags()

    @property
    def scheduler(self) -> AsyncIOScheduler:
        """Get or create the APScheduler instance."""
        if self._scheduler is None:
            self._scheduler = AsyncIOScheduler(
                jobstores={'default': MemoryJobStore()},
                executors={'default': AsyncIOExecutor()},
                job_defaults={
                    'coalesce': True,  # Combine missed executions
                    'max_instances': 1,
                    'misfire_grace_time': 60,
                },
                timezone='UTC',
            )
        return self._scheduler

    @property
    def is_running(self) -> bool:
        """Check if the scheduler is currently running."""
        return self._is_running and self._scheduler is not None

    def start(self) -> bool:
        """Start the background scheduler.

        Only starts if the FF_ENABLE_BACKGROUND_JOBS feature flag is enabled.

        Returns:
            True if the scheduler is running after the call.
        """
        if not self._flags.is_enabled(FeatureFlags.ENABLE_BACKGROUND_JOBS):
            logger.info("Background jobs disabled by feature flag")
            return False

        if self._is_running:
            logger.warning("Scheduler already running")
            return True

        self.scheduler.start()
        self._is_running = True
        logger.info("Background job scheduler started")
        return True

    def shutdown(self, wait: bool = True) -> None:
        """Shutdown the scheduler gracefully.

        Args:
            wait: If True, wait for running jobs to complete.
        """
        if not self._is_running or self._scheduler is None:
            return

        self._scheduler.shutdown(wait=wait)
        self._is_running = False
        logger.info("Background job scheduler stopped")

    def add_job(
        self,
        func: Callable,
        *,
        minutes: Optional[float] = None,
        seconds: Optional[float] = None,
        cron: Optional[str] = None,
        job_id: Optional[str] = None,
        replace_existing: bool = True,
        **kwargs: Any,
    ) -> str:
        """Add a job to the scheduler.

        Args:
            func: The async function to execute.
            minutes: Interval in minutes.
            seconds: Interval in seconds.
            cron: Cron expression (e.g., "*/15 * * * *").
            job_id: Unique identifier for the job.
            replace_existing: Replace if job_id already exists.
            **kwargs: Additional arguments passed to the job function.

        Returns:
            The job ID.

        Raises:
            ValueError: If no schedule is specified.
        """
        if cron:
            trigger = CronTrigger.from_crontab(cron)
        elif minutes or seconds:
            trigger = IntervalTrigger(minutes=minutes or 0, seconds=seconds or 0)
        else:
            raise ValueError("Must specify cron, minutes, or seconds")

        job_id = job_id or f"{func.__module__}.{func.__name__}"

        job = self.scheduler.add_job(
            func,
            trigger=trigger,
            id=job_id,
            replace_existing=replace_existing,
            kwargs=kwargs,
        )

        logger.info(f"Scheduled job '{job_id}' with trigger: {trigger}")
        return job.id

    def remove_job(self, job_id: str) -> bool:
        """Remove a job from the scheduler.

        Returns:
            True if job was removed, False if not found.
        """
        try:
            self.scheduler.remove_job(job_id)
        except JobLookupError:
            logger.warning(f"Job '{job_id}' not found")
            return False
        logger.info(f"Removed job '{job_id}'")
        return True

    def get_jobs(self) -> list[dict[str, Any]]:
        """Get information about all scheduled jobs."""
        jobs = []
        for job in self.scheduler.get_jobs():
            next_run = getattr(job, 'next_run_time', None)
            jobs.append({
                'id': job.id,
                'name': job.name,
                'next_run': next_run.isoformat() if next_run else None,
                'trigger': str(job.trigger),
            })
        return jobs

    def schedule_session_cleanup(
        self,
        store: SessionStore,
        interval_minutes: int = 15,
        job_id: str = "session-cleanup",
    ) -> str:
        """Schedule periodic removal of completed sessions.

        Args:
            store: Session store to sweep.
            interval_minutes: Minutes between sweeps.
            job_id: Unique identifier for this job.

        Returns:
            The job ID.
        """
        from src.jobs.tasks import run_session_cleanup

        return self.add_job(
            run_session_cleanup,
            minutes=interval_minutes,
            job_id=job_id,
            store=store,
        )

    def schedule_rate_limit_prune(
        self,
        limiter: RateLimiter,
        interval_minutes: int = 15,
        job_id: str = "rate-limit-prune",
    ) -> str:
        """Schedule periodic removal of expired rate limit windows."""
        from src.jobs.tasks import run_rate_limit_prune

        return self.add_job(
            run_rate_limit_prune,
            minutes=interval_minutes,
            job_id=job_id,
            limiter=limiter,
        )
