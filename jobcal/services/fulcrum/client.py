#!/usr/bin/env python3
"""Fulcrum API client — authenticated JSON POSTs and response-envelope unwrapping."""

import logging
from typing import Any, Optional, Union

import httpx
from pydantic import ValidationError

from jobcal.config import Settings
from jobcal.schemas.jobs import Job, OperationEntry

logger = logging.getLogger(__name__)

JOBS_LIST = "/api/jobs/list"

# Keys under which list endpoints may nest their rows
ENVELOPE_KEYS = ("items", "results", "data")


def job_operations_path(job_id: Union[str, int]) -> str:
    return f"/api/jobs/{job_id}/operations/list"


class UpstreamError(Exception):
    """Non-success status (or transport failure) from the Fulcrum API."""

    def __init__(self, status_code: Optional[int], body: str) -> None:
        self.status_code = status_code
        self.body = body
        msg = f"{status_code} {body}" if status_code is not None else body
        super().__init__(msg)


def unwrap_items(raw: Any) -> list[Any]:
    """
    Normalise a list response.  A bare list passes through; an object
    yields the first list found under ``items``, ``results`` or ``data``;
    anything else is an empty list, not an error.
    """
    if isinstance(raw, list):
        return raw
    if isinstance(raw, dict):
        for key in ENVELOPE_KEYS:
            value = raw.get(key)
            if isinstance(value, list):
                return value
    return []


class FulcrumClient:
    """Thin async wrapper over the two Fulcrum list endpoints we need."""

    def __init__(
        self,
        base_url: str,
        token: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "FulcrumClient":
        return cls(
            settings.fulcrum_base,
            settings.fulcrum_token,
            timeout=settings.upstream_timeout_seconds,
        )

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.token}",
            "Accept": "application/json",
            "Content-Type": "application/json",
        }

    async def post_json(self, path: str, body: Optional[dict[str, Any]] = None) -> Any:
        """POST ``body`` as JSON and return the decoded response."""
        logger.debug("POST %s%s", self.base_url, path)
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                r = await client.post(
                    f"{self.base_url}{path}",
                    json=body or {},
                    headers=self._headers(),
                )
        except httpx.HTTPError as e:
            raise UpstreamError(None, f"{type(e).__name__}: {e}") from e
        if not r.is_success:
            raise UpstreamError(r.status_code, r.text)
        try:
            return r.json()
        except ValueError as e:
            raise UpstreamError(r.status_code, f"invalid JSON: {r.text[:200]}") from e

    async def list_jobs(self, body: dict[str, Any]) -> list[Job]:
        """List jobs matching a Fulcrum filter body (limit, statuses, created window)."""
        raw = await self.post_json(JOBS_LIST, body)
        jobs: list[Job] = []
        for row in unwrap_items(raw):
            if not isinstance(row, dict):
                continue
            try:
                jobs.append(Job.model_validate(row))
            except ValidationError as e:
                logger.warning("skipping unreadable job %r: %s", row.get("id"), e)
        return jobs

    async def list_operations(
        self, job_id: Union[str, int], limit: int = 200
    ) -> list[OperationEntry]:
        """List a job's operations, each paired with its item-to-make when present."""
        raw = await self.post_json(job_operations_path(job_id), {"limit": limit})
        entries: list[OperationEntry] = []
        for row in unwrap_items(raw):
            if not isinstance(row, dict):
                continue
            try:
                entries.append(OperationEntry.from_raw(row))
            except ValidationError as e:
                logger.warning("skipping unreadable operation on job %s: %s", job_id, e)
        return entries
