"""Run lifecycle statuses reported by the platform."""

from __future__ import annotations

from enum import Enum


class RunStatus(str, Enum):
    READY = "READY"
    RUNNING = "RUNNING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"
    TIMING_OUT = "TIMING-OUT"
    TIMED_OUT = "TIMED-OUT"
    ABORTING = "ABORTING"
    ABORTED = "ABORTED"


ACTIVE_STATUSES: frozenset[str] = frozenset({RunStatus.READY.value, RunStatus.RUNNING.value})


def is_active(status: str) -> bool:
    """Only READY and RUNNING keep a run in the poll loop; anything else is terminal."""
    return status in ACTIVE_STATUSES
