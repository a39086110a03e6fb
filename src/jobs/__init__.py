"""Background jobs package.

Scheduled maintenance for the assessment service: completed session cleanup
and rate limit window pruning.
"""

from src.jobs.scheduler import JobScheduler
from src.jobs.tasks import run_rate_limit_prune, run_session_cleanup

__all__ = ["JobScheduler", "run_rate_limit_prune", "run_session_cleanup"]
