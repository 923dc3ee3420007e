"""HTTP fetching with a TTL-governed on-disk cache in front of it."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import httpx
import structlog

from ..config import BrowserConfig
from ..errors import CacheReadError, FetchError
from ..infra import SourceCache
from ..logging_conf import component_logger


@dataclass(slots=True)
class FetchResult:
    """A document together with where it came from."""

    url: str
    content: bytes = field(repr=False)
    from_cache: bool

    @property
    def text(self) -> str:
        return self.content.decode("utf-8")


class Fetcher:
    """Retrieve remote documents, serving them from the cache while still fresh."""

    def __init__(
        self,
        config: BrowserConfig,
        cache: SourceCache,
        client: httpx.Client | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.config = config
        self.cache = cache
        self.logger = logger or component_logger("fetcher")
        self._headers = {
            "Application-Name": config.application_name,
            "Application-Version": config.application_version,
            "User-Agent": config.user_agent,
            "Accept-Encoding": "gzip, deflate",
        }
        if client is None:
            client_kwargs: dict = {"follow_redirects": True}
            if config.request_timeout is not None:
                client_kwargs["timeout"] = config.request_timeout
            client = httpx.Client(**client_kwargs)
        self._client = client

    @property
    def headers(self) -> dict[str, str]:
        return dict(self._headers)

    def close(self) -> None:
        self._client.close()

    def fetch(self, url: str, cache_path: Path, ttl: float, force: bool = False) -> FetchResult:
        """Return the document at ``url``, from ``cache_path`` unless it is stale.

        A network failure raises :class:`FetchError` and leaves the cache as it
        was. An unreadable cache file is treated as stale.
        """

        if not force and not self.cache.should_refresh(cache_path, ttl):
            try:
                content = self.cache.read(cache_path)
            except CacheReadError as exc:
                self.logger.warning("cache_unreadable", url=url, path=str(cache_path), error=str(exc))
            else:
                self.logger.debug("cache_hit", url=url, path=str(cache_path))
                return FetchResult(url=url, content=content, from_cache=True)

        self.logger.debug("downloading", url=url)
        content = self.download(url)
        try:
            self.cache.write(cache_path, content)
        except OSError as exc:
            self.logger.error("cache_write_failed", url=url, path=str(cache_path), error=str(exc))
        return FetchResult(url=url, content=content, from_cache=False)

    def download(self, url: str) -> bytes:
        """GET ``url`` without touching the cache."""

        try:
            response = self._client.get(url, headers=self._headers)
        except httpx.HTTPError as exc:
            raise FetchError(url, f"Request failed ({exc.__class__.__name__}: {exc})") from exc
        if not response.is_success:
            raise FetchError(url, f"Unexpected status {response.status_code}", response.status_code)
        return response.content


__all__ = ["FetchResult", "Fetcher"]
