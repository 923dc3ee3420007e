"""Published catalog state shared between sync tasks and the consumer."""

from __future__ import annotations

from enum import Enum
from threading import Lock
from typing import Iterable

import structlog

from .engine.models import Entry
from .logging_conf import component_logger


class CatalogState(str, Enum):
    EMPTY = "empty"
    FETCHING = "fetching"
    PUBLISHED = "published"


class CatalogStore:
    """Hold the current catalog and the bookkeeping guarding its replacement.

    Each piece of shared state has its own lock: the catalog pointer, the
    priority-set pointer, the generation counter and the per-cycle URL guard.
    Readers get immutable tuples/frozensets and never see a half-built catalog.
    A new generation resets the URL guard before any claim can observe it.
    """

    def __init__(self, logger: structlog.BoundLogger | None = None) -> None:
        self.logger = logger or component_logger("store")
        self._catalog: tuple[Entry, ...] = ()
        self._catalog_lock = Lock()
        self._priority: frozenset[str] = frozenset()
        self._priority_lock = Lock()
        self._generation = 0
        self._generation_lock = Lock()
        self._fetched: set[str] = set()
        self._fetched_generation = 0
        self._fetched_lock = Lock()
        self._state = CatalogState.EMPTY

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------
    @property
    def generation(self) -> int:
        with self._generation_lock:
            return self._generation

    def begin_fetch(self) -> int:
        """Start a new fetch cycle; any cycle started earlier becomes stale."""

        with self._generation_lock:
            self._generation += 1
            generation = self._generation
            with self._fetched_lock:
                self._fetched_generation = generation
                self._fetched = set()
        self._state = CatalogState.FETCHING
        return generation

    def is_current(self, generation: int) -> bool:
        return generation == self.generation

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------
    @property
    def state(self) -> CatalogState:
        return self._state

    @property
    def catalog(self) -> tuple[Entry, ...]:
        with self._catalog_lock:
            return self._catalog

    def publish(self, generation: int, entries: Iterable[Entry]) -> bool:
        """Swap in ``entries`` if ``generation`` is still the newest cycle."""

        snapshot = tuple(entries)
        with self._generation_lock:
            if generation != self._generation:
                self.logger.debug(
                    "stale_publish_discarded", generation=generation, current=self._generation
                )
                return False
            with self._catalog_lock:
                self._catalog = snapshot
        self._state = CatalogState.PUBLISHED
        self.logger.debug("catalog_published", generation=generation, repos=len(snapshot))
        return True

    def reorder(self, source: tuple[Entry, ...], entries: Iterable[Entry]) -> bool:
        """Replace ``source`` with a reordering of it, unless a newer catalog landed."""

        snapshot = tuple(entries)
        with self._catalog_lock:
            if self._catalog is not source:
                return False
            self._catalog = snapshot
            return True

    # ------------------------------------------------------------------
    # Priority set
    # ------------------------------------------------------------------
    @property
    def priority(self) -> frozenset[str]:
        with self._priority_lock:
            return self._priority

    def publish_priority(self, urls: Iterable[str]) -> None:
        snapshot = frozenset(urls)
        with self._priority_lock:
            self._priority = snapshot

    # ------------------------------------------------------------------
    # Per-cycle URL guard
    # ------------------------------------------------------------------
    def claim_url(self, url: str, generation: int | None = None) -> bool:
        """Return False when ``url`` has already been taken in this cycle.

        The guard belongs to the cycle that last reset it. A claim from any
        other cycle is answered without touching the guard; a superseded
        cycle's result is discarded at publish anyway.
        """

        with self._fetched_lock:
            if generation is not None and generation != self._fetched_generation:
                return True
            if url in self._fetched:
                return False
            self._fetched.add(url)
            return True

    def clear_fetched(self) -> None:
        with self._fetched_lock:
            self._fetched.clear()


__all__ = ["CatalogState", "CatalogStore"]
