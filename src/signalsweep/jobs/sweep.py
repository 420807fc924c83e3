"""Scheduled sweep job."""

from datetime import UTC, datetime, timedelta

import structlog

from signalsweep.config import get_settings
from signalsweep.db import get_db
from signalsweep.retention.policy import EvictionPolicy
from signalsweep.retention.store import SignalStore
from signalsweep.retention.sweeper import SweepResult, sweep

logger = structlog.get_logger()


def run_sweep(
    now: datetime | None = None,
    policy: EvictionPolicy | None = None,
    dry_run: bool = False,
) -> SweepResult:
    """Run one sweep in its own transaction.

    The delete commits when the session scope closes. Errors roll the scope
    back and propagate to the caller unchanged.
    """
    settings = get_settings()
    now = now or datetime.now(UTC)
    policy = policy or settings.eviction_policy

    with get_db() as session:
        result = sweep(
            SignalStore(session),
            now,
            policy=policy,
            retention=timedelta(seconds=settings.retention_seconds),
            include_counts=settings.include_counts,
            dry_run=dry_run,
        )

    logger.info(
        "Signal cleanup finished",
        deleted=result.deleted_count,
        before=result.before,
        after=result.after,
    )
    return result
