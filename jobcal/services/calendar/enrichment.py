"""Per-job operation lookups (cached, bounded fan-out) feeding the mapper."""

import asyncio
import logging
from typing import Dict, List, NamedTuple, Optional, Sequence

from jobcal.cache import OperationCache
from jobcal.schemas.jobs import ItemToMake, Job, Operation, OperationEntry
from jobcal.services.calendar.selection import select_primary
from jobcal.services.fulcrum.client import FulcrumClient

logger = logging.getLogger(__name__)


class Primary(NamedTuple):
    operation: Operation
    item: Optional[ItemToMake]
    matched: bool


def primary_for(job: Job, entries: Sequence[OperationEntry]) -> Optional[Primary]:
    """Select the primary operation and carry its item-to-make along."""
    selection = select_primary(job, [e.operation for e in entries])
    if selection.operation is None:
        return None
    entry = next(e for e in entries if e.operation is selection.operation)
    return Primary(selection.operation, entry.item_to_make, selection.matched)


async def operations_for(
    job_key: str,
    client: FulcrumClient,
    cache: OperationCache,
    limit: int = 200,
) -> List[OperationEntry]:
    cached = cache.get(job_key)
    if cached is not None:
        return cached
    entries = await client.list_operations(job_key, limit=limit)
    cache.put(job_key, entries)
    return entries


async def enrich_jobs(
    jobs: Sequence[Job],
    client: FulcrumClient,
    cache: OperationCache,
    concurrency: int = 4,
    limit: int = 200,
) -> Dict[str, Optional[Primary]]:
    """
    Resolve a primary operation for every job that has an id.

    Jobs are drawn from one queue by ``concurrency`` workers, so each is
    fetched exactly once.  A failed lookup maps that job to None and
    leaves the others alone.
    """
    queue: asyncio.Queue = asyncio.Queue()
    for job in jobs:
        if job.key is not None:
            queue.put_nowait(job)

    results: Dict[str, Optional[Primary]] = {}

    async def worker() -> None:
        while True:
            try:
                job = queue.get_nowait()
            except asyncio.QueueEmpty:
                return
            try:
                entries = await operations_for(job.key, client, cache, limit)
                results[job.key] = primary_for(job, entries)
            except Exception as e:
                logger.warning("operation lookup failed for job %s: %s", job.key, e)
                results[job.key] = None
            finally:
                queue.task_done()

    workers = max(1, min(concurrency, queue.qsize()))
    await asyncio.gather(*(worker() for _ in range(workers)))
    return results
