"""Retention sweep over the signals table."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import UUID

import structlog

from signalsweep.retention.policy import RETENTION_WINDOW, EvictionPolicy, compute_threshold, eviction_clause
from signalsweep.retention.store import SignalStore

logger = structlog.get_logger()


@dataclass(frozen=True)
class SweepResult:
    threshold: datetime
    policy: EvictionPolicy
    completed_at: datetime
    deleted_ids: tuple[UUID, ...] = field(default_factory=tuple)
    before: int | None = None
    after: int | None = None
    matched: int | None = None
    dry_run: bool = False

    @property
    def deleted_count(self) -> int:
        return len(self.deleted_ids)

    def to_payload(self) -> dict[str, Any]:
        """Success body returned by the handler and ``sweep --json``."""
        payload: dict[str, Any] = {
            "success": True,
            "deleted": self.deleted_count,
            "threshold": self.threshold.isoformat(),
            "policy": self.policy.value,
        }
        if self.before is not None:
            payload["before"] = self.before
        if self.after is not None:
            payload["after"] = self.after
        if self.dry_run:
            payload["dry_run"] = True
            payload["matched"] = self.matched
        payload["timestamp"] = self.completed_at.isoformat()
        return payload


def _utcnow() -> datetime:
    return datetime.now(UTC)


def sweep(
    store: SignalStore,
    now: datetime,
    *,
    policy: EvictionPolicy = EvictionPolicy.AGE_ONLY,
    retention: timedelta = RETENTION_WINDOW,
    include_counts: bool = True,
    dry_run: bool = False,
    clock: Callable[[], datetime] | None = None,
) -> SweepResult:
    """Delete every signal eligible under ``policy`` as of ``now``.

    The cutoff is computed once from ``now`` so every row is judged against
    the same instant. The delete is committed as soon as it returns, so a
    failing after-count cannot bring deleted rows back. Store failures raise
    ``StoreError`` and are not retried; the next scheduled sweep picks up
    whatever is left.

    Args:
        store: Signal store bound to an open session.
        now: Reference instant (timezone-aware).
        policy: Eviction predicate to apply.
        retention: Age after which signals are considered abandoned.
        include_counts: Also report table size before and after the delete.
        dry_run: Count eligible rows instead of deleting them.
        clock: Source of the completion timestamp (defaults to UTC wall clock).

    Returns:
        SweepResult describing what was actually deleted.
    """
    threshold = compute_threshold(now, retention)
    clause = eviction_clause(policy, threshold)
    log = logger.bind(policy=policy.value, threshold=threshold.isoformat(), dry_run=dry_run)
    log.info("Running signal cleanup")

    before = store.count() if include_counts else None

    deleted_ids: tuple[UUID, ...] = ()
    matched = None
    if dry_run:
        matched = store.count(clause)
        log.info("Dry run, signals left in place", matched=matched)
    else:
        deleted_ids = tuple(store.delete_matching(clause))
        store.commit()
        log.info("Deleted abandoned signals", deleted=len(deleted_ids))

    after = store.count() if include_counts else None

    return SweepResult(
        threshold=threshold,
        policy=policy,
        completed_at=(clock or _utcnow)(),
        deleted_ids=deleted_ids,
        before=before,
        after=after,
        matched=matched,
        dry_run=dry_run,
    )
