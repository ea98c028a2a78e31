import datetime

from jobcal.models import JobStatus
from jobcal.schemas.calendar import FeedQuery
from jobcal.services.calendar.feed import in_window, iso_utc, job_list_body

UTC = datetime.timezone.utc


def dt(*args):
    return datetime.datetime(*args, tzinfo=UTC)


def test_iso_utc_matches_upstream_shape():
    assert iso_utc(dt(2024, 6, 1, 8, 5, 9, 123456)) == "2024-06-01T08:05:09.123Z"


def test_job_list_body_minimal():
    body = job_list_body(FeedQuery(limit=25), buffer_days=180)
    assert body == {"limit": 25}


def test_job_list_body_pads_created_window():
    query = FeedQuery(
        since=dt(2024, 6, 1),
        until=dt(2024, 7, 1),
        statuses=[JobStatus.scheduled, JobStatus.in_progress],
    )
    body = job_list_body(query, buffer_days=10)
    assert body == {
        "limit": 500,
        "statuses": ["scheduled", "inProgress"],
        "createdAfterUtc": "2024-05-22T00:00:00.000Z",
        "createdBeforeUtc": "2024-07-11T00:00:00.000Z",
    }


def test_in_window_bounds_are_inclusive():
    start, end = dt(2024, 6, 10, 8), dt(2024, 6, 10, 9)
    assert in_window(start, end, None, None)
    assert in_window(start, end, dt(2024, 6, 10), dt(2024, 6, 11))
    assert in_window(start, end, None, start)
    assert in_window(start, end, end, None)
    assert not in_window(start, end, dt(2024, 6, 11), None)
    assert not in_window(start, end, None, dt(2024, 6, 10, 7, 59))


def test_in_window_without_end_uses_start():
    start = dt(2024, 5, 31, 12)
    assert not in_window(start, None, dt(2024, 6, 1), None)
    assert in_window(start, None, dt(2024, 5, 31, 12), None)


def test_in_window_requires_a_start():
    assert not in_window(None, None, None, None)
    assert not in_window(None, dt(2024, 6, 1), None, None)
