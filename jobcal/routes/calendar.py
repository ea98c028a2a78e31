#!/usr/bin/env python3
"""FastAPI router — the subscribable job calendar and a diagnostic feed."""

import datetime
import logging
from typing import Dict, Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import PlainTextResponse, Response

from jobcal.cache import OperationCache, ResponseCache
from jobcal.config import Settings
from jobcal.deps import (
    get_fulcrum_client,
    get_operation_cache,
    get_response_cache,
    get_settings,
    require_access_key,
)
from jobcal.models import parse_statuses
from jobcal.schemas.calendar import CalendarEvent, FeedQuery
from jobcal.schemas.jobs import parse_timestamp
from jobcal.services.calendar import ics
from jobcal.services.calendar.feed import build_feed
from jobcal.services.fulcrum.client import FulcrumClient

logger = logging.getLogger(__name__)

router = APIRouter(tags=["calendar"])

ICS_MEDIA_TYPE = "text/calendar; charset=utf-8"
DEFAULT_LIMIT = 500


def _feed_headers(etag: str, filename: str) -> Dict[str, str]:
    return {
        "Cache-Control": "no-cache",
        "ETag": etag,
        "Content-Disposition": f'inline; filename="{filename}"',
    }


def _cache_key(request: Request) -> str:
    url = request.url
    return f"{url.path}?{url.query}" if url.query else url.path


def _window_bound(raw: Optional[str], name: str, whole_day: bool = False) -> Optional[datetime.datetime]:
    """Parse ?s= / ?u=.  A date-only upper bound reaches the last instant of that UTC day."""
    if not raw:
        return None
    dt = parse_timestamp(raw)
    if dt is None:
        logger.warning("ignoring unparseable %s=%r", name, raw)
        return None
    if whole_day and len(raw.strip()) == 10:
        dt += datetime.timedelta(days=1) - datetime.timedelta(microseconds=1)
    return dt


def _limit(raw: Optional[str]) -> int:
    """?limit= as a positive int; anything else falls back to the default."""
    if raw is None or not raw.strip():
        return DEFAULT_LIMIT
    try:
        value = int(raw)
    except ValueError:
        value = 0
    if value < 1:
        logger.warning("ignoring invalid limit=%r", raw)
        return DEFAULT_LIMIT
    return value


# ---------------------------------------------------------------------------
# Job feed
# ---------------------------------------------------------------------------

@router.get("/calendar.ics", dependencies=[Depends(require_access_key)])
async def calendar_feed(
    request: Request,
    s: Optional[str] = Query(None, description="Window start, ISO date"),
    u: Optional[str] = Query(None, description="Window end, ISO date"),
    ops: Optional[str] = Query(None, description='"1" enables operation enrichment'),
    allday: Optional[str] = Query(None, description='"0" renders timed events'),
    statuses: Optional[str] = Query(None, description="Comma-separated, e.g. scheduled,in_progress"),
    limit: Optional[str] = Query(None, description="Max jobs requested upstream (default 500)"),
    cfg: Settings = Depends(get_settings),
    client: FulcrumClient = Depends(get_fulcrum_client),
    response_cache: ResponseCache = Depends(get_response_cache),
    op_cache: OperationCache = Depends(get_operation_cache),
) -> Response:
    """Render Fulcrum jobs as an iCalendar feed, served from cache when fresh."""
    key = _cache_key(request)
    hit = response_cache.get(key)
    if hit is not None:
        logger.info("calendar cache hit: %s", key)
        if request.headers.get("if-none-match") == hit.etag:
            return Response(status_code=304, headers={"ETag": hit.etag})
        return Response(
            hit.body,
            media_type=ICS_MEDIA_TYPE,
            headers=_feed_headers(hit.etag, cfg.feed_filename),
        )

    try:
        query = FeedQuery(
            since=_window_bound(s, "s"),
            until=_window_bound(u, "u", whole_day=True),
            include_ops=ops == "1",
            all_day=allday != "0",
            statuses=parse_statuses(statuses),
            limit=_limit(limit),
        )
        body = await build_feed(query, client, op_cache, cfg)
    except Exception as e:
        logger.exception("calendar feed failed")
        return PlainTextResponse(f"Error: {e}", status_code=500)

    feed = response_cache.store(key, body)
    return Response(
        feed.body,
        media_type=ICS_MEDIA_TYPE,
        headers=_feed_headers(feed.etag, cfg.feed_filename),
    )


# ---------------------------------------------------------------------------
# Diagnostics
# ---------------------------------------------------------------------------

@router.get("/test.ics")
def test_feed(cfg: Settings = Depends(get_settings)) -> Response:
    """One event starting now — checks that a client renders the feed at all."""
    now = datetime.datetime.now(datetime.timezone.utc)
    event = CalendarEvent(
        uid=f"test-one@{cfg.uid_domain}",
        start=now,
        end=now + datetime.timedelta(minutes=30),
        summary="Test Event (should appear today)",
        description="This is a diagnostic VEVENT\nIf you can see this, Outlook is rendering.",
    )
    body = ics.render_calendar(
        [event],
        all_day=False,
        name="Fulcrum Test",
        prodid="-//JobCal//Fulcrum Test//EN",
        domain=cfg.uid_domain,
        stamp=now,
    )
    return Response(body, media_type=ICS_MEDIA_TYPE, headers={"Cache-Control": "no-cache"})
