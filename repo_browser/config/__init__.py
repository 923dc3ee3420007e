"""Configuration package exports."""

from .loader import ConfigLocator, ConfigRepository
from .models import (
    BrowserConfig,
    BrowserState,
    DisplayFilters,
    EndpointConfig,
    ScheduleConfig,
    ScheduleType,
    SortMode,
)

__all__ = [
    "BrowserConfig",
    "BrowserState",
    "ConfigLocator",
    "ConfigRepository",
    "DisplayFilters",
    "EndpointConfig",
    "ScheduleConfig",
    "ScheduleType",
    "SortMode",
]
