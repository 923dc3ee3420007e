"""Disk-backed cache of fetched documents and their TTL bookkeeping."""

from __future__ import annotations

import os
import tempfile
import time
from pathlib import Path
from threading import Lock
from typing import Callable

import structlog

from ..config import BrowserState, ConfigRepository
from ..errors import CacheReadError
from ..logging_conf import component_logger


class SourceCache:
    """Store raw documents on disk and decide when they need a network refresh.

    Fetch timestamps are milliseconds since the epoch, persisted in the browser
    state keyed by cache file name. A timestamp of zero means "never fetched".
    """

    def __init__(
        self,
        repository: ConfigRepository,
        clock: Callable[[], float] = time.time,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.repository = repository
        self.clock = clock
        self.logger = logger or component_logger("cache")
        self._write_lock = Lock()

    def _now_ms(self, now: float | None = None) -> int:
        return int((self.clock() if now is None else now) * 1000)

    def last_fetched(self, path: Path) -> int:
        return self.repository.load_state().last_fetched.get(path.name, 0)

    def should_refresh(self, path: Path, ttl: float, now: float | None = None) -> bool:
        """Return True when ``path`` is missing, never fetched, or older than ``ttl`` seconds."""

        try:
            if not path.exists():
                return True
            last = self.last_fetched(path)
            if last == 0:
                return True
            return self._now_ms(now) >= last + int(ttl * 1000)
        except Exception as exc:  # noqa: BLE001
            self.logger.warning("cache_check_failed", path=str(path), error=str(exc))
            return True

    def read(self, path: Path) -> bytes:
        try:
            return path.read_bytes()
        except OSError as exc:
            raise CacheReadError(f"Cannot read cached document {path}: {exc}") from exc

    def write(self, path: Path, data: bytes) -> None:
        """Atomically replace the cached document and stamp the fetch time."""

        path.parent.mkdir(parents=True, exist_ok=True)
        with self._write_lock:
            fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
            try:
                with os.fdopen(fd, "wb") as stream:
                    stream.write(data)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        stamp = self._now_ms()

        def _stamp(state: BrowserState) -> None:
            state.last_fetched[path.name] = stamp

        self.repository.update_state(_stamp)
        self.logger.debug("cache_written", path=str(path), size=len(data))

    def reset(self, *paths: Path) -> None:
        """Zero the fetch timestamps so the next fetch goes to the network."""

        def _zero(state: BrowserState) -> None:
            for path in paths:
                state.last_fetched[path.name] = 0

        self.repository.update_state(_zero)


__all__ = ["SourceCache"]
