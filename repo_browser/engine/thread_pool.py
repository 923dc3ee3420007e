"""Executors for sync cycles: one coordinator pool plus one pool per cache line."""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor
from threading import Lock
from typing import Any, Callable, Dict


class ThreadPoolManager:
    """Hand out executors so the two fetch lines never queue behind each other."""

    def __init__(self, default_workers: int = 2, line_workers: int = 1) -> None:
        self.default_workers = max(1, default_workers)
        self.line_workers = max(1, line_workers)
        self._default_executor = ThreadPoolExecutor(
            max_workers=self.default_workers, thread_name_prefix="repo-browser"
        )
        self._executors: Dict[str, ThreadPoolExecutor] = {}
        self._lock = Lock()

    def get(self, line: str | None = None) -> ThreadPoolExecutor:
        if line is None:
            return self._default_executor
        with self._lock:
            if line not in self._executors:
                self._executors[line] = ThreadPoolExecutor(
                    max_workers=self.line_workers, thread_name_prefix=f"repo-browser-{line}"
                )
            return self._executors[line]

    def submit(self, line: str | None, fn: Callable[..., Any], *args: Any) -> Future:
        return self.get(line).submit(fn, *args)

    def shutdown(self, wait: bool = False) -> None:
        self._default_executor.shutdown(wait=wait)
        with self._lock:
            for executor in self._executors.values():
                executor.shutdown(wait=wait)
            self._executors.clear()


__all__ = ["ThreadPoolManager"]
