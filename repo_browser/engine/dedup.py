"""Cross-repository plugin deduplication.

Every plugin name that appears in more than one repository is reduced in two
steps. First per developer, so that one developer's mirrors and backup
repositories count as a single listing. Then across developers, where a
repository on the priority list wins outright; without one, each developer's
listing survives side by side.

Within a candidate set the listing with the highest API level wins, then the
most recent update, then whichever came first in the input.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import AbstractSet, Iterable, Sequence

import structlog

from ..logging_conf import component_logger
from .models import Entry, Item

UNKNOWN_DEVELOPER = "Unknown Developer"


@dataclass(frozen=True, slots=True)
class Occurrence:
    """One plugin as listed by one repository."""

    entry: Entry
    item: Item

    @property
    def developer(self) -> str:
        return self.entry.owner or self.item.author or UNKNOWN_DEVELOPER


def best_candidate(candidates: Sequence[Occurrence]) -> Occurrence:
    """Pick the highest API level, then the latest update; first wins on ties."""

    return max(candidates, key=lambda occ: (occ.item.api_level, occ.item.last_update))


def group_by_key(entries: Iterable[Entry]) -> dict[str, list[Occurrence]]:
    groups: dict[str, list[Occurrence]] = defaultdict(list)
    for entry in entries:
        for item in entry.plugins:
            if item.key:
                groups[item.key].append(Occurrence(entry, item))
    return groups


def select_occurrences(
    occurrences: Sequence[Occurrence], priority: AbstractSet[str]
) -> list[Occurrence]:
    """Reduce every listing of one plugin key to the listings that stay visible."""

    by_developer: dict[str, list[Occurrence]] = defaultdict(list)
    for occ in occurrences:
        by_developer[occ.developer].append(occ)

    survivors: list[Occurrence] = []
    for developer_group in by_developer.values():
        trusted = [occ for occ in developer_group if occ.entry.url in priority]
        survivors.append(best_candidate(trusted or developer_group))

    trusted_survivors = [occ for occ in survivors if occ.entry.url in priority]
    if trusted_survivors:
        return [best_candidate(trusted_survivors)]
    return survivors


def deduplicate(
    entries: Sequence[Entry],
    priority: AbstractSet[str],
    logger: structlog.BoundLogger | None = None,
) -> list[Entry]:
    """Return the catalog with one canonical listing per plugin and developer.

    Pure function of its inputs. Entries keep their input order; entries left
    without plugins are dropped and the rest get their aggregates recomputed.
    """

    groups = group_by_key(entries)
    permitted: dict[str, set[str]] = defaultdict(set)
    for key, occurrences in groups.items():
        for occ in select_occurrences(occurrences, priority):
            permitted[occ.entry.url].add(key)

    result: list[Entry] = []
    for entry in entries:
        keys = permitted.get(entry.url)
        if not keys:
            continue
        plugins = [item for item in entry.plugins if item.key and item.key in keys]
        if plugins:
            result.append(entry.with_plugins(plugins))

    (logger or component_logger("dedup")).debug(
        "deduplication_complete",
        repos_in=len(entries),
        repos_out=len(result),
        unique_plugins=len(groups),
        priority_repos=len(priority),
    )
    return result


__all__ = ["Occurrence", "UNKNOWN_DEVELOPER", "best_candidate", "deduplicate", "select_occurrences"]
