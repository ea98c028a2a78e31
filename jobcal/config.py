#!/usr/bin/env python3
"""Configuration settings loaded from environment / .env file."""

from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Fulcrum (upstream scheduling API)
    fulcrum_token: str                  # required — no default, startup fails without it
    fulcrum_base: str = "https://api.fulcrumpro.com"
    upstream_timeout_seconds: float = 30.0

    # Optional shared secret, required as ?key=... when set
    access_key: Optional[str] = None

    # Rendered-feed cache, keyed per request URL
    cache_ttl_seconds: int = 60

    # Per-job operation enrichment
    ops_cache_ttl_seconds: int = 300
    ops_cache_max_entries: int = 1000
    ops_concurrency: int = 4
    ops_list_limit: int = 200

    # Padding applied to s/u when building the upstream created-window filter
    created_window_buffer_days: int = 180

    # Calendar presentation
    calendar_name: str = "Fulcrum Schedule"
    calendar_prodid: str = "-//JobCal//Fulcrum Jobs Schedule//EN"
    uid_domain: str = "jobcal"
    feed_filename: str = "fulcrum-schedule.ics"

    log_level: str = "INFO"


settings = Settings()
