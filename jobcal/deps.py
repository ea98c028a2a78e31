#!/usr/bin/env python3
"""Reusable FastAPI dependency functions: settings, upstream client, caches, access key."""

import secrets
from typing import Optional

from fastapi import Depends, Query, Request

from jobcal.cache import OperationCache, ResponseCache
from jobcal.config import Settings, settings
from jobcal.services.fulcrum.client import FulcrumClient


class AccessDenied(Exception):
    """Shared-secret mismatch; rendered as a bare 403 by the app."""


def get_settings() -> Settings:
    return settings


def get_fulcrum_client(cfg: Settings = Depends(get_settings)) -> FulcrumClient:
    return FulcrumClient.from_settings(cfg)


def get_response_cache(request: Request) -> ResponseCache:
    return request.app.state.response_cache


def get_operation_cache(request: Request) -> OperationCache:
    return request.app.state.operation_cache


def require_access_key(
    key: Optional[str] = Query(None, description="Shared secret, when one is configured"),
    cfg: Settings = Depends(get_settings),
) -> None:
    """Raise AccessDenied unless ``?key=`` matches the configured access key."""
    if not cfg.access_key:
        return
    if key is None or not secrets.compare_digest(
        key.encode("utf-8"), cfg.access_key.encode("utf-8")
    ):
        raise AccessDenied()
