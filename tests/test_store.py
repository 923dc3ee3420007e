from __future__ import annotations

from threading import Barrier, Thread

from builders import dump, plugin_record, repo_record
from repo_browser.engine.parser import CatalogParser
from repo_browser.store import CatalogState, CatalogStore


def test_publish_swaps_catalog_for_current_generation(make_item, make_entry) -> None:
    store = CatalogStore()
    assert store.state is CatalogState.EMPTY
    assert store.catalog == ()

    generation = store.begin_fetch()
    assert store.state is CatalogState.FETCHING
    entries = [make_entry("https://a/repo.json", [make_item("A")])]

    assert store.publish(generation, entries)
    assert store.catalog == tuple(entries)
    assert store.state is CatalogState.PUBLISHED


def test_stale_generation_is_discarded(make_item, make_entry, recording_logger) -> None:
    store = CatalogStore(logger=recording_logger)
    first = store.begin_fetch()
    store.publish(first, [make_entry("https://old/repo.json", [make_item("A")])])

    stale = store.begin_fetch()
    current = store.begin_fetch()
    assert not store.is_current(stale)
    assert store.is_current(current)

    assert not store.publish(stale, [make_entry("https://stale/repo.json", [make_item("B")])])
    assert [entry.url for entry in store.catalog] == ["https://old/repo.json"]
    assert recording_logger.named("stale_publish_discarded") == [{"generation": stale, "current": current}]

    assert store.publish(current, [make_entry("https://new/repo.json", [make_item("C")])])
    assert [entry.url for entry in store.catalog] == ["https://new/repo.json"]


def test_published_catalog_is_an_immutable_snapshot(make_item, make_entry) -> None:
    store = CatalogStore()
    entries = [make_entry("https://a/repo.json", [make_item("A")])]
    store.publish(store.begin_fetch(), entries)
    entries.append(make_entry("https://b/repo.json", [make_item("B")]))
    assert len(store.catalog) == 1


def test_reorder_does_not_overwrite_newer_catalog(make_item, make_entry) -> None:
    store = CatalogStore()
    a = make_entry("https://a/repo.json", [make_item("A")])
    b = make_entry("https://b/repo.json", [make_item("B")])
    store.publish(store.begin_fetch(), [a, b])
    source = store.catalog

    assert store.reorder(source, [b, a])
    assert store.catalog == (b, a)

    newer = make_entry("https://c/repo.json", [make_item("C")])
    store.publish(store.begin_fetch(), [newer])
    assert not store.reorder(source, [b, a])
    assert store.catalog == (newer,)


def test_claim_url_guard_is_per_cycle() -> None:
    store = CatalogStore()
    generation = store.begin_fetch()
    assert store.claim_url("https://a", generation)
    assert not store.claim_url("https://a", generation)

    next_generation = store.begin_fetch()
    assert store.claim_url("https://a", next_generation)
    assert not store.claim_url("https://a")


def test_stale_claims_leave_guard_alone() -> None:
    store = CatalogStore()
    stale = store.begin_fetch()
    current = store.begin_fetch()
    assert store.claim_url("https://a", stale)
    assert store.claim_url("https://a", stale)
    assert store.claim_url("https://a", current)
    assert not store.claim_url("https://a", current)


class _InterruptingLock:
    """Run ``interrupt`` once, just before the guard lock is first taken."""

    def __init__(self, inner, interrupt) -> None:  # noqa: ANN001
        self.inner = inner
        self.interrupt = interrupt

    def __enter__(self):
        interrupt, self.interrupt = self.interrupt, None
        if interrupt is not None:
            interrupt()
        return self.inner.__enter__()

    def __exit__(self, *exc_info):
        return self.inner.__exit__(*exc_info)


def test_refresh_racing_a_stale_claim_keeps_url_for_new_cycle() -> None:
    store = CatalogStore()
    stale = store.begin_fetch()
    store._fetched_lock = _InterruptingLock(store._fetched_lock, store.begin_fetch)  # type: ignore[assignment]

    assert store.claim_url("https://a/repo.json", stale)

    current = store.generation
    assert current == stale + 1
    assert store.claim_url("https://a/repo.json", current)
    assert not store.claim_url("https://a/repo.json", current)


def test_current_cycle_parse_keeps_url_claimed_by_racing_stale_cycle() -> None:
    store = CatalogStore()
    stale = store.begin_fetch()
    store._fetched_lock = _InterruptingLock(store._fetched_lock, store.begin_fetch)  # type: ignore[assignment]
    document = dump([repo_record("https://a.example/repo.json", [plugin_record("Foo")])])
    assert list(CatalogParser().parse(document, claim=lambda url: store.claim_url(url, stale)))

    current = store.generation
    parsed = CatalogParser().parse(document, claim=lambda url: store.claim_url(url, current))

    assert [entry.url for entry in parsed] == ["https://a.example/repo.json"]


def test_concurrent_claims_admit_exactly_one() -> None:
    store = CatalogStore()
    generation = store.begin_fetch()
    barrier = Barrier(8)
    results: list[bool] = []

    def worker() -> None:
        barrier.wait()
        results.append(store.claim_url("https://contested", generation))

    threads = [Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert sorted(results) == [False] * 7 + [True]


def test_priority_set_is_replaced_wholesale() -> None:
    store = CatalogStore()
    assert store.priority == frozenset()
    store.publish_priority(["https://a", "https://b"])
    snapshot = store.priority
    store.publish_priority(["https://c"])
    assert snapshot == {"https://a", "https://b"}
    assert store.priority == {"https://c"}
