#!/usr/bin/env python3
"""RFC 5545 rendering of CalendarEvents via icalendar."""

import datetime
import hashlib
from typing import Iterable, Optional

from icalendar import Calendar, Event

from jobcal.schemas.calendar import CalendarEvent

UID_PREFIX = "fulcrum:"


def clean_text(value: object) -> str:
    """Normalise line breaks so any CR / CRLF / LF is escaped as one ``\\n``."""
    s = "" if value is None else str(value)
    return s.replace("\r\n", "\n").replace("\r", "\n")


def utc(dt: datetime.datetime) -> datetime.datetime:
    """Aware UTC datetime; naive values are taken as UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=datetime.timezone.utc)
    return dt.astimezone(datetime.timezone.utc)


def utc_date(d: datetime.date) -> datetime.date:
    """Calendar date of ``d`` in UTC; plain dates pass through."""
    if isinstance(d, datetime.datetime):
        return utc(d).date()
    return d


def event_uid(event_id: object, domain: str) -> str:
    """Stable UID: sha1 of a fixed prefix + job id, tagged with ``@domain``."""
    digest = hashlib.sha1(f"{UID_PREFIX}{event_id}".encode("utf-8")).hexdigest()
    return f"{digest}@{domain}"


def _uid_for(event: CalendarEvent, domain: str) -> str:
    if event.uid:
        return event.uid
    if event.id is not None and str(event.id):
        return event_uid(event.id, domain)
    # No job id upstream: fall back to what identifies the event on screen.
    start = utc(event.start).strftime("%Y%m%dT%H%M%SZ") if event.start else ""
    return event_uid(f"{event.summary}|{start}", domain)


def build_event(
    event: CalendarEvent,
    all_day: bool = False,
    domain: str = "jobcal",
    stamp: Optional[datetime.datetime] = None,
) -> Event:
    """Build one VEVENT component."""
    if event.start is None:
        raise ValueError("cannot render an event without a start")
    stamp = stamp or datetime.datetime.now(datetime.timezone.utc)
    end = event.end or event.start

    e = Event()
    e.add("uid", _uid_for(event, domain))
    e.add("dtstamp", utc(stamp))
    if all_day:
        # DATE values: DTEND is the day after the last day covered.
        e.add("dtstart", utc_date(event.start))
        e.add("dtend", utc_date(end) + datetime.timedelta(days=1))
    else:
        e.add("dtstart", utc(event.start))
        e.add("dtend", utc(end))
    e.add("summary", clean_text(event.summary or "Scheduled Work"))
    if event.location:
        e.add("location", clean_text(event.location))
    if event.description:
        e.add("description", clean_text(event.description))
    if event.categories:
        e.add("categories", [clean_text(c) for c in event.categories])
    return e


def render_calendar(
    events: Iterable[CalendarEvent],
    all_day: bool = False,
    name: str = "Fulcrum Schedule",
    prodid: str = "-//JobCal//Fulcrum Jobs Schedule//EN",
    domain: str = "jobcal",
    stamp: Optional[datetime.datetime] = None,
) -> str:
    """Render a complete VCALENDAR document; icalendar folds lines at 75 octets."""
    stamp = stamp or datetime.datetime.now(datetime.timezone.utc)
    cal = Calendar()
    cal.add("prodid", prodid)
    cal.add("version", "2.0")
    cal.add("calscale", "GREGORIAN")
    cal.add("method", "PUBLISH")
    cal.add("x-wr-calname", name)
    cal.add("x-wr-timezone", "UTC")
    for event in events:
        cal.add_component(build_event(event, all_day=all_day, domain=domain, stamp=stamp))
    return cal.to_ical().decode("utf-8")
