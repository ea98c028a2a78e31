#!/usr/bin/env python3
"""Upstream job status enum and the friendly-name lookup used by ?statuses=."""

import enum
from typing import Dict, List, Optional


class JobStatus(str, enum.Enum):
    draft       = "draft"
    scheduled   = "scheduled"
    in_progress = "inProgress"
    on_hold     = "onHold"
    complete    = "complete"
    cancelled   = "cancelled"


DEFAULT_STATUSES: List[JobStatus] = [JobStatus.scheduled, JobStatus.in_progress]

# Keys are lower-cased with "-" and " " folded to "_".
FRIENDLY_STATUSES: Dict[str, JobStatus] = {
    "draft": JobStatus.draft,
    "scheduled": JobStatus.scheduled,
    "in_progress": JobStatus.in_progress,
    "inprogress": JobStatus.in_progress,
    "started": JobStatus.in_progress,
    "on_hold": JobStatus.on_hold,
    "onhold": JobStatus.on_hold,
    "hold": JobStatus.on_hold,
    "complete": JobStatus.complete,
    "completed": JobStatus.complete,
    "done": JobStatus.complete,
    "cancelled": JobStatus.cancelled,
    "canceled": JobStatus.cancelled,
}


def _friendly_key(name: str) -> str:
    return name.strip().lower().replace("-", "_").replace(" ", "_")


def lookup_status(name: str) -> Optional[JobStatus]:
    """Return the upstream status for a friendly name, or None if unknown."""
    return FRIENDLY_STATUSES.get(_friendly_key(name))


def parse_statuses(raw: Optional[str]) -> List[JobStatus]:
    """
    Turn a comma-separated ``?statuses=`` value into upstream enum members.

    Unknown names are dropped; when nothing usable remains the default
    set (scheduled + in progress) is returned.  Order follows first
    appearance and duplicates collapse.
    """
    if not raw:
        return list(DEFAULT_STATUSES)
    picked: List[JobStatus] = []
    for part in raw.split(","):
        status = lookup_status(part) if part.strip() else None
        if status is not None and status not in picked:
            picked.append(status)
    return picked or list(DEFAULT_STATUSES)
