"""Debounced sort countdown and the sort/enabled/seen recomputation."""

from __future__ import annotations

from dataclasses import dataclass
from threading import Lock
from typing import AbstractSet, Callable, Iterable, Sequence

from ..config import SortMode
from ..engine.models import Entry


@dataclass(frozen=True, slots=True)
class SortOutcome:
    """Result of one sort pass over the published catalog."""

    entries: tuple[Entry, ...]
    enabled: frozenset[str]
    seen: frozenset[str]


class SortScheduler:
    """Countdown armed on publish and consumed once per consumer tick.

    ``consume_tick`` is edge-triggered: it returns True exactly once, on the
    tick that brings the countdown to zero.
    """

    def __init__(self, ticks: int = 60) -> None:
        self.ticks = max(1, ticks)
        self._countdown = 0
        self._lock = Lock()

    @property
    def countdown(self) -> int:
        with self._lock:
            return self._countdown

    def arm(self) -> None:
        with self._lock:
            self._countdown = self.ticks

    def request(self) -> None:
        """Ask for a sort on the very next tick."""

        with self._lock:
            self._countdown = 1

    def consume_tick(self) -> bool:
        with self._lock:
            if self._countdown <= 0:
                return False
            self._countdown -= 1
            return self._countdown == 0


def sort_entries(entries: Iterable[Entry], mode: SortMode) -> list[Entry]:
    entries = list(entries)
    if mode is SortMode.OWNER:
        return sorted(entries, key=lambda entry: entry.owner.casefold())
    if mode is SortMode.URL:
        return sorted(entries, key=lambda entry: entry.url.casefold())
    if mode is SortMode.PLUGIN_COUNT:
        return sorted(entries, key=lambda entry: len(entry.plugins), reverse=True)
    if mode is SortMode.LAST_UPDATED:
        return sorted(entries, key=lambda entry: entry.last_updated, reverse=True)
    return entries


def partition_seen(entries: Sequence[Entry], previously_seen: AbstractSet[str]) -> list[Entry]:
    """Stable partition: previously seen entries first, new ones after."""

    seen = [entry for entry in entries if entry.url in previously_seen]
    unseen = [entry for entry in entries if entry.url not in previously_seen]
    return seen + unseen


def sort_and_update_seen(
    entries: Sequence[Entry],
    mode: SortMode,
    previously_seen: AbstractSet[str],
    is_enabled: Callable[[str], bool],
) -> SortOutcome:
    """Sort, collect enabled sources by either URL spelling, and mark all as seen."""

    ordered = sort_entries(entries, mode)
    enabled = frozenset(
        entry.url for entry in ordered if is_enabled(entry.url) or is_enabled(entry.raw_url)
    )
    seen = frozenset(previously_seen) | {entry.url for entry in ordered}
    return SortOutcome(
        entries=tuple(partition_seen(ordered, previously_seen)),
        enabled=enabled,
        seen=seen,
    )


__all__ = ["SortOutcome", "SortScheduler", "partition_seen", "sort_and_update_seen", "sort_entries"]
