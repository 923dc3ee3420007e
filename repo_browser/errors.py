"""Exception types raised by the catalog synchronisation engine."""

from __future__ import annotations


class RepoBrowserError(Exception):
    """Base class for every error raised by repo_browser."""


class FetchError(RepoBrowserError):
    """A remote document could not be retrieved (transport or HTTP status)."""

    def __init__(self, url: str, message: str, status_code: int | None = None) -> None:
        super().__init__(f"{message}: {url}")
        self.url = url
        self.status_code = status_code


class CacheReadError(RepoBrowserError):
    """A cached document exists on paper but cannot be read back from disk."""


class ParseError(RepoBrowserError):
    """A whole document is unusable (not JSON, or not the expected shape)."""


__all__ = ["CacheReadError", "FetchError", "ParseError", "RepoBrowserError"]
