"""Scheduled task definitions for background jobs.

Each task is an async function run by the JobScheduler. Tasks receive the
service they maintain as an argument and return a summary dictionary.
"""

import logging
from typing import Any

from src.modules.assessment.session_store import SessionStore
from src.modules.resilience import RateLimiter
from src.shared.datetime_utils import datetime_to_iso, utc_now

logger = logging.getLogger(__name__)


async def run_session_cleanup(store: SessionStore) -> dict[str, Any]:
    """Drop completed sessions older than the store's retention window.

    Returns:
        Summary with the number of sessions removed and still held.
    """
    started_at = utc_now()
    removed = store.cleanup_completed_sessions(started_at)

    logger.info(
        f"Session cleanup task finished: {removed} removed, "
        f"{store.session_count} remaining"
    )
    return {
        'started_at': datetime_to_iso(started_at),
        'sessions_removed': removed,
        'sessions_remaining': store.session_count,
    }


async def run_rate_limit_prune(limiter: RateLimiter) -> dict[str, Any]:
    """Forget rate limit windows that have already expired."""
    removed = limiter.prune_expired()
    logger.debug(f"Rate limit prune task finished: {removed} windows removed")
    return {'windows_removed': removed}
