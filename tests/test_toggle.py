from __future__ import annotations

from repo_browser.toggle import InMemorySourceToggle, SourceToggle


def test_in_memory_toggle_satisfies_protocol() -> None:
    assert isinstance(InMemorySourceToggle(), SourceToggle)


def test_toggle_flips_known_and_adds_unknown() -> None:
    toggle = InMemorySourceToggle(enabled=["https://a"], disabled=["https://b"])
    assert toggle.is_enabled("https://a")
    assert toggle.has("https://b") and not toggle.is_enabled("https://b")

    toggle.toggle("https://a")
    toggle.toggle("https://b")
    toggle.toggle("https://c")

    assert toggle.snapshot() == {"https://a": False, "https://b": True, "https://c": True}


def test_add_enables_source() -> None:
    toggle = InMemorySourceToggle(disabled=["https://a"])
    toggle.add("https://a")
    toggle.add("https://b")
    assert toggle.is_enabled("https://a")
    assert toggle.is_enabled("https://b")
    assert not toggle.has("https://c")
