"""Host capability deciding which third-party sources are enabled."""

from __future__ import annotations

from threading import Lock
from typing import Iterable, Protocol, runtime_checkable


@runtime_checkable
class SourceToggle(Protocol):
    """What the browser needs from the host's third-party source settings.

    Only URL strings cross this boundary; how enablement is stored is the
    host's business.
    """

    def has(self, url: str) -> bool: ...

    def is_enabled(self, url: str) -> bool: ...

    def toggle(self, url: str) -> None: ...

    def add(self, url: str) -> None: ...


class InMemorySourceToggle:
    """Dictionary-backed toggle for embedders without a host settings store."""

    def __init__(self, enabled: Iterable[str] = (), disabled: Iterable[str] = ()) -> None:
        self._lock = Lock()
        self._sources: dict[str, bool] = {url: False for url in disabled}
        self._sources.update({url: True for url in enabled})

    def has(self, url: str) -> bool:
        with self._lock:
            return url in self._sources

    def is_enabled(self, url: str) -> bool:
        with self._lock:
            return self._sources.get(url, False)

    def toggle(self, url: str) -> None:
        """Flip a known source; an unknown one is added enabled."""

        with self._lock:
            self._sources[url] = not self._sources.get(url, False)

    def add(self, url: str) -> None:
        with self._lock:
            self._sources[url] = True

    def snapshot(self) -> dict[str, bool]:
        with self._lock:
            return dict(self._sources)


__all__ = ["InMemorySourceToggle", "SourceToggle"]
