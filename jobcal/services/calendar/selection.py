"""Pick the one operation that best represents a job's calendar window."""

from typing import NamedTuple, Optional, Sequence

from jobcal.schemas.jobs import Job, Operation


class Selection(NamedTuple):
    operation: Optional[Operation]
    matched: bool    # True when the job window overlapped, False for the earliest fallback


def select_primary(job: Job, operations: Sequence[Operation]) -> Selection:
    """
    Best-effort choice of a primary operation.

    Operations without any start are ignored; the rest are ordered by
    effective start (stable on ties).  When the job has a start, the first
    candidate overlapping the job window wins; if the job has no end the
    first candidate starting at or after the job start wins instead.
    Otherwise the earliest candidate is returned.
    """
    candidates = sorted(
        (o for o in operations or () if o is not None and o.effective_start is not None),
        key=lambda o: o.effective_start,
    )
    if not candidates:
        return Selection(None, False)

    job_start = job.effective_start
    job_end = job.effective_end
    if job_start is not None:
        for op in candidates:
            op_start = op.effective_start
            op_end = op.effective_end or op_start
            if job_end is not None:
                hit = op_start <= job_end and op_end >= job_start
            else:
                hit = op_start >= job_start
            if hit:
                return Selection(op, True)
    return Selection(candidates[0], False)


def pick_primary(job: Job, operations: Sequence[Operation]) -> Optional[Operation]:
    return select_primary(job, operations).operation
