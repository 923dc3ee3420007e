"""Search and display filters applied by consumers over a catalog snapshot."""

from __future__ import annotations

from dataclasses import dataclass
from typing import AbstractSet, Iterable

from .config import DisplayFilters
from .engine.models import Entry, Item

# Plugin caps at or above this value hide no repository.
UNLIMITED_PLUGINS = 50


@dataclass(frozen=True, slots=True)
class CatalogQuery:
    """One consumer request: free-text search plus the user's display filters."""

    search: str = ""
    hide_enabled_repos: bool = False
    hide_closed_source_plugins: bool = False
    hide_non_english_plugins: bool = False
    show_outdated_plugins: bool = True
    current_api_level: int = 0
    max_plugins: int = UNLIMITED_PLUGINS

    @classmethod
    def from_filters(cls, filters: DisplayFilters, search: str = "", current_api_level: int = 0) -> "CatalogQuery":
        return cls(
            search=search,
            hide_enabled_repos=filters.hide_enabled_repos,
            hide_closed_source_plugins=filters.hide_closed_source_plugins,
            hide_non_english_plugins=filters.hide_non_english_plugins,
            show_outdated_plugins=filters.show_outdated_plugins,
            current_api_level=current_api_level,
            max_plugins=filters.max_plugins,
        )


def is_current_or_unknown(item: Item, current_api_level: int) -> bool:
    return item.api_level == 0 or item.api_level == current_api_level


def item_searchable(item: Item, query: CatalogQuery) -> bool:
    """Language and closed-source filters; outdated plugins still match a search."""

    if query.hide_non_english_plugins and not item.is_latin_only:
        return False
    return not (query.hide_closed_source_plugins and item.is_closed_source)


def item_visible(item: Item, query: CatalogQuery) -> bool:
    if not item_searchable(item, query):
        return False
    if not query.show_outdated_plugins and not is_current_or_unknown(item, query.current_api_level):
        return False
    return True


def item_matches(item: Item, search: str) -> bool:
    """Substring match on text fields, exact (case-insensitive) match on tags."""

    needle = search.casefold()
    if any(needle in text.casefold() for text in (item.name, item.punchline, item.description)):
        return True
    return any(tag.casefold() == needle for tag in (*item.tags, *item.category_tags))


def entry_matches(entry: Entry, query: CatalogQuery) -> bool:
    if not query.search:
        return False
    needle = query.search.casefold()
    if needle in entry.url.casefold() or needle in entry.full_name.casefold():
        return True
    return any(item_searchable(item, query) and item_matches(item, query.search) for item in entry.plugins)


def visible_plugins(entry: Entry, query: CatalogQuery) -> list[Item]:
    return [item for item in entry.plugins if item_visible(item, query)]


def exceeds_plugin_cap(entry: Entry, query: CatalogQuery) -> bool:
    return query.max_plugins < UNLIMITED_PLUGINS and len(entry.plugins) > query.max_plugins


def filter_catalog(
    entries: Iterable[Entry],
    query: CatalogQuery,
    enabled: AbstractSet[str] = frozenset(),
) -> list[Entry]:
    """Return the entries to list, each narrowed to its visible plugins.

    With a search string only matching entries are kept. Repositories listing
    more plugins than the cap are left out whole, as are entries whose every
    plugin is filtered out.
    """

    result: list[Entry] = []
    for entry in entries:
        if query.hide_enabled_repos and entry.url in enabled:
            continue
        if exceeds_plugin_cap(entry, query):
            continue
        if query.search and not entry_matches(entry, query):
            continue
        plugins = visible_plugins(entry, query)
        if plugins:
            result.append(entry.with_plugins(plugins))
    return result


__all__ = [
    "CatalogQuery",
    "UNLIMITED_PLUGINS",
    "entry_matches",
    "exceeds_plugin_cap",
    "filter_catalog",
    "item_matches",
    "item_searchable",
    "item_visible",
    "visible_plugins",
]
