from __future__ import annotations

import dataclasses

import pytest

from repo_browser.engine.models import Entry, Item, RemoteUpdateInfo


def test_item_key_prefers_internal_name() -> None:
    assert Item(name="Display", internal_name="Stable").key == "Stable"
    assert Item(name="Display").key == "Display"
    assert Item(name="").key == ""


def test_item_is_immutable() -> None:
    item = Item(name="Foo")
    with pytest.raises(dataclasses.FrozenInstanceError):
        item.name = "Bar"  # type: ignore[misc]


@pytest.mark.parametrize(
    ("name", "description", "expected"),
    [
        ("Simple Tweaks", "Small quality of life changes", True),
        ("Café Helper", "Résumé naïve façade", True),
        ("Timers 2.0!", "Counts down :) 100%", True),
        ("自動翻訳", "Translates chat", False),
        ("Helper", "Описание плагина", False),
        ("", "", True),
    ],
)
def test_item_latin_only_flag(name: str, description: str, expected: bool) -> None:
    assert Item(name=name, description=description).is_latin_only is expected


def test_entry_aggregates_are_max_over_plugins(make_item, make_entry) -> None:
    entry = make_entry(
        "https://example.com/repo.json",
        [
            make_item("A", api_level=8, last_update=300),
            make_item("B", api_level=10, last_update=100),
            make_item("C", api_level=9, last_update=200),
        ],
    )
    assert entry.api_level == 10
    assert entry.last_updated == 300


def test_entry_without_plugins_has_zero_aggregates(make_entry) -> None:
    entry = make_entry("https://example.com/empty.json")
    assert entry.plugins == ()
    assert entry.api_level == 0
    assert entry.last_updated == 0


def test_with_plugins_recomputes_and_keeps_identity(make_item, make_entry) -> None:
    old = make_item("Old", api_level=7, last_update=50)
    new = make_item("New", api_level=10, last_update=500)
    entry = make_entry("https://example.com/repo.json", [old, new], owner="dev", branch_name="testing")

    filtered = entry.with_plugins([old])

    assert filtered is not entry
    assert filtered.plugins == (old,)
    assert filtered.api_level == 7
    assert filtered.last_updated == 50
    assert filtered.url == entry.url
    assert filtered.raw_url == entry.raw_url
    assert filtered.branch_name == "testing"
    assert entry.plugins == (old, new)
    assert entry.api_level == 10


def test_entry_accepts_any_iterable_of_plugins(make_item) -> None:
    entry = Entry(url="https://a", raw_url="https://a", plugins=[make_item("X")])  # type: ignore[arg-type]
    assert isinstance(entry.plugins, tuple)


def test_remote_update_info_defaults_to_six_hour_cadence() -> None:
    assert not RemoteUpdateInfo().known
    assert RemoteUpdateInfo().expected_next_update == 0
    info = RemoteUpdateInfo(updated_utc=1_000)
    assert info.known
    assert info.expected_next_update == 1_000 + 6 * 60 * 60
    assert RemoteUpdateInfo(updated_utc=1_000, next_update_utc=5_000).expected_next_update == 5_000
