#!/usr/bin/env python3
"""Calendar-side models: the rendered event and the parsed feed query."""

import datetime
from typing import List, Optional, Union

from pydantic import BaseModel, Field

from jobcal.models import JobStatus


class CalendarEvent(BaseModel):
    """A job as it will appear in the feed; built per request, never stored."""
    id: Optional[Union[str, int]] = None
    start: Optional[datetime.datetime] = None
    end: Optional[datetime.datetime] = None
    summary: str = "Scheduled Work"
    location: str = ""
    description: str = ""
    categories: List[str] = Field(default_factory=list)
    uid: Optional[str] = None       # overrides the hashed UID when set


class FeedQuery(BaseModel):
    since: Optional[datetime.datetime] = None
    until: Optional[datetime.datetime] = None   # inclusive upper bound
    include_ops: bool = False
    all_day: bool = True
    statuses: List[JobStatus] = Field(default_factory=list)
    limit: int = 500
