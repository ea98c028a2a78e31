import asyncio

import httpx
import pytest

from jobcal.services.fulcrum.client import FulcrumClient, UpstreamError, unwrap_items


@pytest.mark.parametrize(
    "raw, expected",
    [
        ([1, 2], [1, 2]),
        ({"items": [1]}, [1]),
        ({"results": [2]}, [2]),
        ({"data": [3]}, [3]),
        ({"items": None, "data": [4]}, [4]),
        ({"total": 0}, []),
        (None, []),
        ("text", []),
    ],
)
def test_unwrap_items(raw, expected):
    assert unwrap_items(raw) == expected


def test_list_jobs_posts_authenticated_json(fulcrum):
    fulcrum.jobs = {"items": [{"id": "J1", "number": 1}, "junk"]}
    jobs = asyncio.run(fulcrum.client().list_jobs({"limit": 5}))
    assert [j.key for j in jobs] == ["J1"]
    call = fulcrum.calls[0]
    assert call["path"] == "/api/jobs/list"
    assert call["body"] == {"limit": 5}
    assert call["headers"]["authorization"] == "Bearer test-token"
    assert call["headers"]["content-type"] == "application/json"


def test_list_operations_uses_job_path_and_limit(fulcrum):
    fulcrum.operations["J1"] = {"data": [{"operation": {"id": "O1"}, "itemToMake": None}]}
    entries = asyncio.run(fulcrum.client().list_operations("J1", limit=50))
    assert entries[0].operation.id == "O1"
    assert fulcrum.calls[0]["path"] == "/api/jobs/J1/operations/list"
    assert fulcrum.calls[0]["body"] == {"limit": 50}


def test_non_success_status_raises_with_body(fulcrum):
    fulcrum.job_status = 401
    with pytest.raises(UpstreamError) as excinfo:
        asyncio.run(fulcrum.client().list_jobs({}))
    assert excinfo.value.status_code == 401
    assert str(excinfo.value) == "401 upstream says no"


def test_transport_failure_is_wrapped():
    def boom(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = FulcrumClient("https://fulcrum.test", "t", transport=httpx.MockTransport(boom))
    with pytest.raises(UpstreamError) as excinfo:
        asyncio.run(client.list_jobs({}))
    assert excinfo.value.status_code is None
    assert "connection refused" in str(excinfo.value)


def test_unreadable_rows_are_skipped(fulcrum):
    fulcrum.jobs = [
        {"id": "J1", "number": 1},
        {"id": "J2", "name": ["not", "text"]},
        {"id": "J3", "name": 4411},
    ]
    jobs = asyncio.run(fulcrum.client().list_jobs({}))
    assert [j.key for j in jobs] == ["J1", "J3"]
    assert jobs[1].name == "4411"

    fulcrum.operations["J1"] = [{"id": "O1", "name": {"bad": 1}}, {"id": "O2", "name": "Weld"}]
    entries = asyncio.run(fulcrum.client().list_operations("J1"))
    assert [e.operation.id for e in entries] == ["O2"]
