"""Pydantic models used across the repo-browser configuration flow."""

from __future__ import annotations

from enum import Enum, IntEnum
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

DEFAULT_FEED_BASE = "https://raw.githubusercontent.com/BeSlightly/Aetherfeed/refs/heads/main/public/data"
DEFAULT_CACHE_TTL_SECONDS = 6 * 60 * 60


class ScheduleType(str, Enum):
    """Scheduler modes for the periodic sync job."""

    CRON = "cron"
    INTERVAL = "interval"


class SortMode(IntEnum):
    """Catalog orderings offered to the user. Values match the persisted setting."""

    DEFAULT = 0
    OWNER = 1
    URL = 2
    PLUGIN_COUNT = 3
    LAST_UPDATED = 4


class ScheduleConfig(BaseModel):
    """Configuration describing when a scheduled sync cycle runs."""

    type: ScheduleType = Field(default=ScheduleType.INTERVAL)
    value: Any = Field(
        default=DEFAULT_CACHE_TTL_SECONDS,
        description="Cron expression, or interval seconds / IntervalTrigger kwargs.",
    )

    @model_validator(mode="after")
    def _validate_value(self) -> "ScheduleConfig":
        if self.type is ScheduleType.CRON and not isinstance(self.value, str):
            raise ValueError("Cron schedule requires string expression")
        if self.type is ScheduleType.INTERVAL:
            if isinstance(self.value, bool) or not isinstance(self.value, (int, float, dict)):
                raise ValueError("Interval schedule requires seconds (int/float) or kwargs dict")
            if isinstance(self.value, (int, float)) and self.value <= 0:
                raise ValueError("Interval seconds must be positive")
        return self


class EndpointConfig(BaseModel):
    """Remote documents the catalog is built from."""

    repo_list_url: str = f"{DEFAULT_FEED_BASE}/plugins.json"
    priority_repos_url: str = f"{DEFAULT_FEED_BASE}/priority-repos.json"
    last_updated_url: str | None = f"{DEFAULT_FEED_BASE}/last-updated.json"

    @field_validator("repo_list_url", "priority_repos_url")
    @classmethod
    def _require_http(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError(f"Endpoint must be an http(s) URL: {value}")
        return value


class DisplayFilters(BaseModel):
    """User-facing filters applied by consumers when listing the catalog."""

    hide_enabled_repos: bool = False
    hide_closed_source_plugins: bool = False
    hide_non_english_plugins: bool = True
    show_outdated_plugins: bool = True
    max_plugins: int = 20

    @field_validator("max_plugins")
    @classmethod
    def _positive_max(cls, value: int) -> int:
        if value < 1:
            raise ValueError("max_plugins must be >= 1")
        return value


class BrowserConfig(BaseModel):
    """Settings shared by every component of the browser."""

    endpoints: EndpointConfig = Field(default_factory=EndpointConfig)
    application_name: str = "DalamudRepoBrowser"
    application_version: str = "1.0.0.0"
    cache_ttl_seconds: int = DEFAULT_CACHE_TTL_SECONDS
    request_timeout: float | None = None
    sort_countdown_ticks: int = 60
    sort_delay_seconds: float | None = None
    sort_mode: SortMode = SortMode.LAST_UPDATED
    thread_pool_workers: int = 2
    current_api_level: int = 0
    schedule: ScheduleConfig = Field(default_factory=ScheduleConfig)
    filters: DisplayFilters = Field(default_factory=DisplayFilters)

    @field_validator("cache_ttl_seconds", "sort_countdown_ticks", "thread_pool_workers")
    @classmethod
    def _non_negative(cls, value: int) -> int:
        if value < 0:
            raise ValueError("value must be >= 0")
        return value

    @field_validator("request_timeout")
    @classmethod
    def _positive_timeout(cls, value: float | None) -> float | None:
        if value is not None and value <= 0:
            raise ValueError("request_timeout must be positive when set")
        return value

    @field_validator("sort_delay_seconds")
    @classmethod
    def _non_negative_delay(cls, value: float | None) -> float | None:
        if value is not None and value < 0:
            raise ValueError("sort_delay_seconds must be >= 0 when set")
        return value

    @property
    def user_agent(self) -> str:
        return f"{self.application_name}/{self.application_version}"


class BrowserState(BaseModel):
    """Mutable bookkeeping persisted between sessions."""

    seen_repos: set[str] = Field(default_factory=set)
    last_fetched: dict[str, int] = Field(
        default_factory=dict,
        description="Milliseconds since epoch of the last successful fetch, keyed by cache file.",
    )
    remote_updated_utc: int = 0
    next_remote_update_utc: int = 0


__all__ = [
    "BrowserConfig",
    "BrowserState",
    "DisplayFilters",
    "EndpointConfig",
    "ScheduleConfig",
    "ScheduleType",
    "SortMode",
]
