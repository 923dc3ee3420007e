"""Aggregated, deduplicated catalog of third-party plugin repositories."""

from .engine import Entry, Item, RemoteUpdateInfo, deduplicate
from .errors import CacheReadError, FetchError, ParseError, RepoBrowserError
from .query import CatalogQuery
from .service import CatalogService, CycleResult
from .store import CatalogStore
from .toggle import InMemorySourceToggle, SourceToggle

__version__ = "1.0.0"

__all__ = [
    "CacheReadError",
    "CatalogQuery",
    "CatalogService",
    "CatalogStore",
    "CycleResult",
    "Entry",
    "FetchError",
    "InMemorySourceToggle",
    "Item",
    "ParseError",
    "RemoteUpdateInfo",
    "RepoBrowserError",
    "SourceToggle",
    "deduplicate",
]
