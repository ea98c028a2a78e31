import datetime

import pytest

from jobcal.models import DEFAULT_STATUSES, JobStatus, lookup_status, parse_statuses
from jobcal.schemas.jobs import Job, OperationEntry, parse_timestamp

UTC = datetime.timezone.utc


@pytest.mark.parametrize("name", ["in_progress", "In-Progress", "inProgress", "in progress", " INPROGRESS "])
def test_in_progress_spellings(name):
    assert lookup_status(name) is JobStatus.in_progress


def test_statuses_default_when_absent_or_unknown():
    assert parse_statuses(None) == DEFAULT_STATUSES
    assert parse_statuses("") == DEFAULT_STATUSES
    assert parse_statuses("bogus, nope") == DEFAULT_STATUSES


def test_statuses_keep_known_entries_in_order():
    assert parse_statuses("in_progress,bogus,scheduled,in-progress") == [
        JobStatus.in_progress,
        JobStatus.scheduled,
    ]
    assert [s.value for s in parse_statuses("Completed")] == ["complete"]


def test_parse_timestamp_variants():
    assert parse_timestamp("2024-06-01T10:00:00Z") == datetime.datetime(2024, 6, 1, 10, tzinfo=UTC)
    assert parse_timestamp("2024-06-01T12:00:00+02:00") == datetime.datetime(2024, 6, 1, 10, tzinfo=UTC)
    assert parse_timestamp("2024-06-01") == datetime.datetime(2024, 6, 1, tzinfo=UTC)
    assert parse_timestamp("2024-06-01T10:00:00") == datetime.datetime(2024, 6, 1, 10, tzinfo=UTC)
    assert parse_timestamp("not a date") is None
    assert parse_timestamp("") is None
    assert parse_timestamp(12345) is None


def test_job_parses_camel_case_and_ignores_garbage_dates():
    job = Job.model_validate({
        "id": 42,
        "number": 7,
        "scheduledStartUtc": "garbage",
        "originalScheduledStartUtc": "2024-06-01T08:00:00Z",
        "somethingElse": True,
    })
    assert job.key == "42"
    assert job.scheduled_start_utc is None
    assert job.effective_start == datetime.datetime(2024, 6, 1, 8, tzinfo=UTC)
    assert job.effective_end is None


def test_operation_entry_accepts_both_shapes():
    wrapped = OperationEntry.from_raw({
        "operation": {"id": "O1", "name": "Weld"},
        "itemToMake": {"itemReference": {"name": "Frame"}, "quantityToMake": 3},
    })
    assert wrapped.operation.name == "Weld"
    assert wrapped.item_to_make.item_reference.name == "Frame"

    bare = OperationEntry.from_raw({"id": "O2", "name": "Paint"})
    assert bare.operation.id == "O2"
    assert bare.item_to_make is None


def test_numeric_text_fields_are_stringified():
    job = Job.model_validate({"id": "J1", "name": 4411, "status": 3})
    assert job.name == "4411"
    assert job.status == "3"
