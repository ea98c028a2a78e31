#!/usr/bin/env python3
"""Feed assembly: list jobs → (optional) enrich → map → window filter → render."""

import datetime
import logging
from typing import Any, Dict, List, Optional

from jobcal.cache import OperationCache
from jobcal.config import Settings
from jobcal.schemas.calendar import CalendarEvent, FeedQuery
from jobcal.services.calendar import ics
from jobcal.services.calendar.enrichment import Primary, enrich_jobs
from jobcal.services.calendar.mapping import schedule_window, to_event
from jobcal.services.fulcrum.client import FulcrumClient

logger = logging.getLogger(__name__)


def iso_utc(dt: datetime.datetime) -> str:
    """``2024-06-01T00:00:00.000Z`` — the upstream's own timestamp shape."""
    dt = dt.astimezone(datetime.timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def job_list_body(query: FeedQuery, buffer_days: int) -> Dict[str, Any]:
    """
    Filter body for the job listing.  Fulcrum only filters on creation
    time, so the schedule window is widened by ``buffer_days`` each way
    and the real window is applied after mapping.
    """
    body: Dict[str, Any] = {"limit": query.limit}
    if query.statuses:
        body["statuses"] = [s.value for s in query.statuses]
    buffer = datetime.timedelta(days=buffer_days)
    if query.since is not None:
        body["createdAfterUtc"] = iso_utc(query.since - buffer)
    if query.until is not None:
        body["createdBeforeUtc"] = iso_utc(query.until + buffer)
    return body


def in_window(
    start: Optional[datetime.datetime],
    end: Optional[datetime.datetime],
    since: Optional[datetime.datetime],
    until: Optional[datetime.datetime],
) -> bool:
    """
    Keep work that is still running at ``since`` and has begun by ``until``
    (both inclusive).  ``end`` is the scheduled end, or the start if none.
    """
    if start is None:
        return False
    end = end or start
    if since is not None and end < since:
        return False
    if until is not None and start > until:
        return False
    return True


async def build_events(
    query: FeedQuery,
    client: FulcrumClient,
    op_cache: OperationCache,
    settings: Settings,
) -> List[CalendarEvent]:
    jobs = await client.list_jobs(job_list_body(query, settings.created_window_buffer_days))

    primaries: Dict[str, Optional[Primary]] = {}
    if query.include_ops:
        primaries = await enrich_jobs(
            jobs,
            client,
            op_cache,
            concurrency=settings.ops_concurrency,
            limit=settings.ops_list_limit,
        )

    events: List[CalendarEvent] = []
    for job in jobs:
        primary = primaries.get(job.key) if job.key is not None else None
        operation = primary.operation if primary else None
        start, end = schedule_window(job, operation)
        if not in_window(start, end, query.since, query.until):
            continue
        events.append(
            to_event(job, operation, primary.item if primary else None, all_day=query.all_day)
        )

    logger.info(
        "feed built: %d jobs, %d events (ops=%s, allday=%s)",
        len(jobs), len(events), query.include_ops, query.all_day,
    )
    return events


async def build_feed(
    query: FeedQuery,
    client: FulcrumClient,
    op_cache: OperationCache,
    settings: Settings,
) -> str:
    """Return the complete, folded VCALENDAR text for ``query``."""
    events = await build_events(query, client, op_cache, settings)
    return ics.render_calendar(
        events,
        all_day=query.all_day,
        name=settings.calendar_name,
        prodid=settings.calendar_prodid,
        domain=settings.uid_domain,
    )
