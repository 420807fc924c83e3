"""Eviction predicates for the signals table.

Two policies are supported:

- ``age_only``: a signal is eligible once it is older than the retention window.
  Anything younger may still belong to an offer/answer/ICE exchange in progress.
- ``status_or_age``: processed signals are eligible immediately; active signals
  get the same grace period as ``age_only``. Rows without a status are kept.

Both predicates are monotonic in time, so overlapping sweeps are harmless.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from enum import Enum

from sqlalchemy import ColumnElement, and_, or_

from signalsweep.models import Signal, SignalStatus

RETENTION_WINDOW = timedelta(minutes=2)


class EvictionPolicy(str, Enum):
    AGE_ONLY = "age_only"
    STATUS_OR_AGE = "status_or_age"


def compute_threshold(now: datetime, retention: timedelta = RETENTION_WINDOW) -> datetime:
    """Return the cutoff below which signals count as abandoned."""
    if now.tzinfo is None or now.utcoffset() is None:
        raise ValueError("now must be timezone-aware")
    if retention <= timedelta(0):
        raise ValueError("retention must be positive")
    return now - retention


def eviction_clause(policy: EvictionPolicy, threshold: datetime) -> ColumnElement[bool]:
    if policy is EvictionPolicy.AGE_ONLY:
        return Signal.created_at < threshold
    if policy is EvictionPolicy.STATUS_OR_AGE:
        return or_(
            Signal.status == SignalStatus.PROCESSED.value,
            and_(Signal.status == SignalStatus.ACTIVE.value, Signal.created_at < threshold),
        )
    raise ValueError(f"Unknown eviction policy: {policy!r}")
