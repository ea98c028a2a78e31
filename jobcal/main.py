#!/usr/bin/env python3
"""JobCal FastAPI application entry point."""

import datetime
import logging

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse, Response

from jobcal.cache import OperationCache, ResponseCache
from jobcal.config import settings
from jobcal.deps import AccessDenied
from jobcal.routes import calendar

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="JobCal",
    description="Fulcrum production jobs as a subscribable iCalendar feed",
    version="0.1.0",
)

# Process-lifetime caches, reached by handlers through jobcal.deps
app.state.response_cache = ResponseCache(settings.cache_ttl_seconds)
app.state.operation_cache = OperationCache(
    settings.ops_cache_ttl_seconds,
    max_entries=settings.ops_cache_max_entries,
)

app.include_router(calendar.router)


@app.exception_handler(AccessDenied)
async def access_denied(request: Request, exc: AccessDenied) -> Response:
    logger.info("rejected %s: bad or missing access key", request.url.path)
    return Response(status_code=403)


@app.get("/", response_class=PlainTextResponse)
def root() -> str:
    return "OK"


@app.get("/health")
def health() -> dict:
    return {"ok": True, "time": datetime.datetime.now(datetime.timezone.utc).isoformat()}
