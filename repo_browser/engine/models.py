"""Immutable catalog records produced by the parser."""

from __future__ import annotations

import unicodedata
from dataclasses import dataclass, field, replace
from typing import Iterable


def _latin_only(*texts: str) -> bool:
    for text in texts:
        for ch in text:
            if ch.isalpha() and not unicodedata.name(ch, "").startswith("LATIN"):
                return False
    return True


@dataclass(frozen=True, slots=True)
class Item:
    """One plugin listing inside a repository descriptor."""

    name: str
    internal_name: str = ""
    author: str = ""
    punchline: str = ""
    description: str = ""
    repo_url: str = ""
    api_level: int = 0
    last_update: int = 0
    tags: tuple[str, ...] = ()
    category_tags: tuple[str, ...] = ()
    is_closed_source: bool = False
    # Used by the language filter; computed once.
    is_latin_only: bool = field(init=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "is_latin_only", _latin_only(self.name, self.description))

    @property
    def key(self) -> str:
        """Identity used to group the same plugin across repositories."""

        return self.internal_name or self.name


@dataclass(frozen=True, slots=True)
class Entry:
    """One repository descriptor: a source URL and the plugins it publishes."""

    url: str
    raw_url: str
    plugins: tuple[Item, ...] = ()
    owner: str = ""
    full_name: str = ""
    git_repo_url: str = ""
    is_default_branch: bool = True
    branch_name: str = ""
    last_updated: int = field(init=False)
    api_level: int = field(init=False)

    def __post_init__(self) -> None:
        plugins = tuple(self.plugins)
        object.__setattr__(self, "plugins", plugins)
        object.__setattr__(self, "last_updated", max((p.last_update for p in plugins), default=0))
        object.__setattr__(self, "api_level", max((p.api_level for p in plugins), default=0))

    def with_plugins(self, plugins: Iterable[Item]) -> "Entry":
        """Return a copy listing only ``plugins``, aggregates recomputed."""

        return replace(self, plugins=tuple(plugins))


@dataclass(frozen=True, slots=True)
class RemoteUpdateInfo:
    """When the publisher last rebuilt the descriptor list, in epoch seconds."""

    updated_utc: int = 0
    next_update_utc: int = 0

    # The publisher rebuilds every six hours when it does not announce a time.
    DEFAULT_PERIOD = 6 * 60 * 60

    @property
    def known(self) -> bool:
        return self.updated_utc > 0

    @property
    def expected_next_update(self) -> int:
        if self.next_update_utc > 0:
            return self.next_update_utc
        if self.updated_utc > 0:
            return self.updated_utc + self.DEFAULT_PERIOD
        return 0


__all__ = ["Entry", "Item", "RemoteUpdateInfo"]
