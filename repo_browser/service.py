"""Catalog service wiring fetching, parsing, dedup, publication and sorting."""

from __future__ import annotations

from concurrent.futures import Future
from dataclasses import dataclass
from pathlib import Path
from threading import Lock
from typing import AbstractSet, Callable

import httpx
import structlog

from .config import BrowserState, ConfigRepository
from .engine import CatalogParser, Entry, Fetcher, RemoteUpdateInfo, ThreadPoolManager, deduplicate
from .errors import FetchError, ParseError
from .infra import SourceCache
from .logging_conf import configure_logging
from .query import CatalogQuery, filter_catalog
from .scheduler import APSchedulerAdapter, SortOutcome, SortScheduler, sort_and_update_seen
from .scheduler.apsched_adapter import SORT_JOB_ID
from .store import CatalogStore
from .toggle import InMemorySourceToggle, SourceToggle

REPOS_LINE = "repos"
PRIORITY_LINE = "priority"
REPOS_CACHE_FILE = "repos.json"
PRIORITY_CACHE_FILE = "priority-repos.json"


@dataclass(frozen=True, slots=True)
class CycleResult:
    """Outcome of one sync cycle across both cache lines."""

    generation: int
    priority_updated: bool
    repos_updated: bool
    published: bool

    @property
    def updated(self) -> bool:
        """True when at least one document was refreshed from the network."""

        return self.priority_updated or self.repos_updated


class CatalogService:
    """Central coordinator owning the catalog lifecycle.

    Sync cycles run on the thread pool; the consumer polls ``current_catalog``
    and ``consume_sort_tick`` from its own loop.
    """

    def __init__(
        self,
        config_repository: ConfigRepository,
        toggle: SourceToggle | None = None,
        *,
        client: httpx.Client | None = None,
        fetcher: Fetcher | None = None,
        parser: CatalogParser | None = None,
        store: CatalogStore | None = None,
        thread_pool: ThreadPoolManager | None = None,
        scheduler: APSchedulerAdapter | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.repository = config_repository
        self.config = config_repository.load_config()
        self.logger = logger or configure_logging(log_dir=config_repository.locator.logs_dir).bind(
            component="catalog_service"
        )
        self.toggle = toggle or InMemorySourceToggle()
        self.cache = SourceCache(config_repository, logger=self.logger.bind(component="cache"))
        self.fetcher = fetcher or Fetcher(
            self.config, self.cache, client=client, logger=self.logger.bind(component="fetcher")
        )
        self.parser = parser or CatalogParser(logger=self.logger.bind(component="parser"))
        self.store = store or CatalogStore(logger=self.logger.bind(component="store"))
        self.thread_pool = thread_pool or ThreadPoolManager(default_workers=self.config.thread_pool_workers)
        self.scheduler = scheduler or APSchedulerAdapter(logger=self.logger.bind(component="scheduler"))
        self.sort_scheduler = SortScheduler(self.config.sort_countdown_ticks)
        # Seen set as of session start; sources first seen later still count as new.
        self._session_seen = frozenset(config_repository.load_state().seen_repos)
        self._enabled: frozenset[str] = frozenset()
        self._listeners: list[Callable[[CycleResult], None]] = []
        self._listeners_lock = Lock()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    @property
    def repos_cache_path(self) -> Path:
        return self.repository.locator.cache_dir / REPOS_CACHE_FILE

    @property
    def priority_cache_path(self) -> Path:
        return self.repository.locator.cache_dir / PRIORITY_CACHE_FILE

    def start(self, run_now: bool = True) -> None:
        """Register the periodic sync job; by default the first cycle runs immediately."""

        self.scheduler.schedule_sync(self.config.schedule, self.run_scheduled_cycle, run_now=run_now)
        self.scheduler.start()

    def stop_sync(self) -> None:
        """Cancel the periodic sync; the published catalog stays readable."""

        self.scheduler.remove_sync()

    def shutdown(self) -> None:
        self.scheduler.shutdown()
        self.thread_pool.shutdown()
        self.fetcher.close()

    def on_catalog_updated(self, callback: Callable[[CycleResult], None]) -> None:
        with self._listeners_lock:
            self._listeners.append(callback)

    # ------------------------------------------------------------------
    # Sync cycles
    # ------------------------------------------------------------------
    def run_scheduled_cycle(self) -> Future:
        return self._start_cycle(force=False)

    def request_manual_refresh(self) -> Future:
        """Drop both caches' freshness and refetch everything from the network."""

        self.logger.debug("manual_refresh_requested")
        self.cache.reset(self.repos_cache_path, self.priority_cache_path)
        return self._start_cycle(force=True)

    def _start_cycle(self, force: bool) -> Future:
        generation = self.store.begin_fetch()
        self.logger.debug("cycle_started", generation=generation, force=force)
        priority_future = self.thread_pool.submit(PRIORITY_LINE, self.sync_priority_repos, force)
        repos_future = self.thread_pool.submit(REPOS_LINE, self.sync_repo_list, generation, force)
        return self.thread_pool.submit(None, self._finish_cycle, generation, priority_future, repos_future)

    def _finish_cycle(self, generation: int, priority_future: Future, repos_future: Future) -> CycleResult:
        priority_updated = priority_future.result()
        repos_updated, published = repos_future.result()
        result = CycleResult(
            generation=generation,
            priority_updated=priority_updated,
            repos_updated=repos_updated,
            published=published,
        )
        self.logger.info(
            "cycle_finished",
            generation=generation,
            priority_updated=priority_updated,
            repos_updated=repos_updated,
            published=published,
        )
        if result.updated:
            self._notify(result)
        return result

    def _notify(self, result: CycleResult) -> None:
        with self._listeners_lock:
            listeners = list(self._listeners)
        for callback in listeners:
            try:
                callback(result)
            except Exception as exc:  # noqa: BLE001
                self.logger.error("listener_failed", callback=repr(callback), error=str(exc))

    def sync_priority_repos(self, force: bool = False) -> bool:
        """Refresh the priority set; return True when it came from the network."""

        url = self.config.endpoints.priority_repos_url
        try:
            result = self.fetcher.fetch(url, self.priority_cache_path, self.config.cache_ttl_seconds, force)
            urls = self.parser.parse_priority(result.content)
        except ParseError as exc:
            self.logger.error("priority_parse_failed", url=url, error=str(exc))
            self.cache.reset(self.priority_cache_path)
            return False
        except Exception as exc:  # noqa: BLE001
            self.logger.error("priority_fetch_failed", url=url, error=str(exc))
            return False
        self.store.publish_priority(urls)
        self.logger.debug("priority_loaded", count=len(urls), from_cache=result.from_cache)
        return not result.from_cache

    def sync_repo_list(self, generation: int, force: bool = False) -> tuple[bool, bool]:
        """Fetch, parse and dedup the descriptor list for ``generation``.

        Returns ``(updated, published)``. A cycle superseded by a newer one
        still reports whether it refreshed the cache, but never publishes.
        """

        url = self.config.endpoints.repo_list_url
        try:
            result = self.fetcher.fetch(url, self.repos_cache_path, self.config.cache_ttl_seconds, force)
        except FetchError as exc:
            self.logger.error("repo_list_fetch_failed", url=url, error=str(exc))
            return False, False
        except Exception as exc:  # noqa: BLE001
            self.logger.error("repo_list_fetch_failed", url=url, error=str(exc), exc_info=True)
            return False, False
        updated = not result.from_cache
        self.refresh_update_info()

        if not self.store.is_current(generation):
            self.logger.debug("stale_cycle_skipped", generation=generation)
            return updated, False

        try:
            entries = list(
                self.parser.parse(result.content, claim=lambda repo_url: self.store.claim_url(repo_url, generation))
            )
        except ParseError as exc:
            self.logger.error("repo_list_parse_failed", url=url, error=str(exc))
            self.cache.reset(self.repos_cache_path)
            return False, False

        priority = self.store.priority
        catalog = deduplicate(entries, priority, logger=self.logger.bind(component="dedup"))
        self.logger.debug(
            "deduplication_applied", repos_in=len(entries), repos_out=len(catalog), priority=len(priority)
        )
        published = self.store.publish(generation, catalog)
        if published:
            self._schedule_sort(immediate=False)
        return updated, published

    def refresh_update_info(self) -> None:
        """Record when the publisher last rebuilt the list. Best effort."""

        url = self.config.endpoints.last_updated_url
        if not url:
            return
        try:
            info = self.parser.parse_update_info(self.fetcher.download(url))
        except (FetchError, ParseError) as exc:
            self.logger.debug("update_info_unavailable", url=url, error=str(exc))
            return

        def _record(state: BrowserState) -> None:
            if info.updated_utc:
                state.remote_updated_utc = info.updated_utc
            if info.next_update_utc:
                state.next_remote_update_utc = info.next_update_utc

        if info.updated_utc or info.next_update_utc:
            self.repository.update_state(_record)

    # ------------------------------------------------------------------
    # Consumer API
    # ------------------------------------------------------------------
    def current_catalog(self) -> tuple[Entry, ...]:
        return self.store.catalog

    def priority_set(self) -> frozenset[str]:
        return self.store.priority

    def remote_update_info(self) -> RemoteUpdateInfo:
        state = self.repository.load_state()
        return RemoteUpdateInfo(
            updated_utc=state.remote_updated_utc,
            next_update_utc=state.next_remote_update_utc,
        )

    def request_sort(self) -> None:
        self._schedule_sort(immediate=True)

    def _schedule_sort(self, immediate: bool) -> None:
        """Arm the tick countdown, or defer a sort job when a delay is configured.

        Each call restarts the wait, so a burst of changes yields one sort.
        """

        delay = self.config.sort_delay_seconds
        if delay is None:
            if immediate:
                self.sort_scheduler.request()
            else:
                self.sort_scheduler.arm()
            return
        self.scheduler.schedule_once(SORT_JOB_ID, self.sort_and_update_seen, 0.0 if immediate else delay)

    def consume_sort_tick(self) -> bool:
        return self.sort_scheduler.consume_tick()

    def tick(self) -> SortOutcome | None:
        """Consumer-loop helper: run the sort pass when the countdown fires."""

        if self.consume_sort_tick():
            return self.sort_and_update_seen()
        return None

    def sort_and_update_seen(self, previously_seen: AbstractSet[str] | None = None) -> SortOutcome:
        source = self.store.catalog
        seen_before = self._session_seen if previously_seen is None else frozenset(previously_seen)
        outcome = sort_and_update_seen(source, self.config.sort_mode, seen_before, self.toggle.is_enabled)
        if not self.store.reorder(source, outcome.entries):
            self.logger.debug("sort_result_superseded")
        self._enabled = outcome.enabled

        def _mark(state: BrowserState) -> None:
            state.seen_repos.update(outcome.seen)

        self.repository.update_state(_mark)
        return outcome

    def enabled_entries(self) -> frozenset[str]:
        """URLs of catalog entries found enabled during the last sort pass."""

        return self._enabled

    def is_entry_enabled(self, entry: Entry) -> bool:
        return self.toggle.is_enabled(entry.url) or self.toggle.is_enabled(entry.raw_url)

    def toggle_source(self, url: str) -> None:
        self.toggle.toggle(url)
        self.request_sort()

    def add_source(self, url: str) -> None:
        self.toggle.add(url)
        self.request_sort()

    def query(self, search: str = "", query: CatalogQuery | None = None) -> list[Entry]:
        query = query or CatalogQuery.from_filters(
            self.config.filters, search=search, current_api_level=self.config.current_api_level
        )
        return filter_catalog(self.store.catalog, query, self._enabled)


__all__ = ["CatalogService", "CycleResult", "PRIORITY_CACHE_FILE", "REPOS_CACHE_FILE"]
