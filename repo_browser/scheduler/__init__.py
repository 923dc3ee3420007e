"""Scheduling: periodic sync jobs and the debounced sort countdown."""

from .apsched_adapter import APSchedulerAdapter
from .sort import SortOutcome, SortScheduler, sort_and_update_seen

__all__ = ["APSchedulerAdapter", "SortOutcome", "SortScheduler", "sort_and_update_seen"]
