import os

# Settings() is built at import time and the token is mandatory.
os.environ.setdefault("FULCRUM_TOKEN", "test-token")
os.environ.pop("ACCESS_KEY", None)

import json
from typing import Any, Callable, Dict, List

import httpx
import pytest
from fastapi.testclient import TestClient

from jobcal.cache import OperationCache, ResponseCache
from jobcal.config import Settings
from jobcal.deps import get_fulcrum_client, get_settings
from jobcal.main import app
from jobcal.services.fulcrum.client import FulcrumClient


class FakeFulcrum:
    """Records upstream calls and answers from canned jobs / operations."""

    def __init__(self) -> None:
        self.jobs: Any = []
        self.operations: Dict[str, Any] = {}
        self.failing_jobs: set = set()
        self.job_status = 200
        self.calls: List[Dict[str, Any]] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content or b"{}")
        self.calls.append({"path": request.url.path, "body": body, "headers": request.headers})
        if request.url.path == "/api/jobs/list":
            if self.job_status != 200:
                return httpx.Response(self.job_status, text="upstream says no")
            return httpx.Response(200, json=self.jobs)
        parts = request.url.path.split("/")
        job_id = parts[3]
        if job_id in self.failing_jobs:
            return httpx.Response(503, text="unavailable")
        return httpx.Response(200, json=self.operations.get(job_id, []))

    def op_calls(self) -> List[str]:
        return [c["path"] for c in self.calls if c["path"] != "/api/jobs/list"]

    def client(self) -> FulcrumClient:
        return FulcrumClient(
            "https://fulcrum.test", "test-token", transport=httpx.MockTransport(self.handler)
        )


@pytest.fixture
def fulcrum() -> FakeFulcrum:
    return FakeFulcrum()


@pytest.fixture
def test_settings() -> Settings:
    return Settings(fulcrum_token="test-token", fulcrum_base="https://fulcrum.test")


@pytest.fixture
def api(fulcrum: FakeFulcrum, test_settings: Settings):
    app.state.response_cache = ResponseCache(60)
    app.state.operation_cache = OperationCache(300, max_entries=100)
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_fulcrum_client] = fulcrum.client
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
