"""Engine components: fetch → parse → dedup."""

from .dedup import deduplicate
from .fetcher import FetchResult, Fetcher
from .models import Entry, Item, RemoteUpdateInfo
from .parser import CatalogParser, derive_raw_url
from .thread_pool import ThreadPoolManager

__all__ = [
    "CatalogParser",
    "Entry",
    "FetchResult",
    "Fetcher",
    "Item",
    "RemoteUpdateInfo",
    "ThreadPoolManager",
    "deduplicate",
    "derive_raw_url",
]
