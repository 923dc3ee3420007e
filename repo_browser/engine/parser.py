"""JSON descriptor parsing into immutable catalog records."""

from __future__ import annotations

import json
import re
from typing import Any, Callable, Iterable, Iterator

import structlog

from ..errors import ParseError
from ..logging_conf import component_logger
from .models import Entry, Item, RemoteUpdateInfo

RAW_CONTENT_PREFIX = "https://raw.githubusercontent.com"
_GITHUB_RE = re.compile("github", re.IGNORECASE)
_RAW_RE = re.compile("/raw", re.IGNORECASE)
MAX_API_LEVEL = 255


def derive_raw_url(url: str) -> str:
    """Normalise a repository URL to its raw-content form.

    Users may have enabled a source under either spelling, so both are checked
    when asking the host whether a source is enabled.
    """

    if url.lower().startswith(RAW_CONTENT_PREFIX):
        return url
    return _GITHUB_RE.sub("raw.githubusercontent", _RAW_RE.sub("", url, count=1), count=1)


def _text(record: dict[str, Any], key: str) -> str:
    value = record.get(key)
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        return str(value)
    raise ValueError(f"{key} must be a string, got {type(value).__name__}")


def _integer(record: dict[str, Any], key: str, upper: int | None = None) -> int:
    value = record.get(key)
    if value is None:
        return 0
    if isinstance(value, bool):
        raise ValueError(f"{key} must be an integer, got bool")
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, str):
        value = int(value.strip())
    if not isinstance(value, int):
        raise ValueError(f"{key} must be an integer, got {type(value).__name__}")
    if value < 0 or (upper is not None and value > upper):
        raise ValueError(f"{key} out of range: {value}")
    return value


def _flag(record: dict[str, Any], key: str) -> bool:
    value = record.get(key)
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    raise ValueError(f"{key} must be a boolean")


def _tags(value: Any) -> tuple[str, ...]:
    if not isinstance(value, list):
        return ()
    return tuple(tag for tag in value if isinstance(tag, str) and tag.strip())


class CatalogParser:
    """Parse the aggregate descriptor list and its companion documents."""

    def __init__(self, logger: structlog.BoundLogger | None = None) -> None:
        self.logger = logger or component_logger("parser")

    def load(self, raw: bytes | str) -> Any:
        try:
            return json.loads(raw)
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise ParseError(f"Document is not valid JSON: {exc}") from exc

    def parse(
        self, raw: bytes | str, claim: Callable[[str], bool] | None = None
    ) -> Iterator[Entry]:
        """Return a lazy iterator of Entries from a descriptor list document.

        ``claim`` is asked for every entry URL and must return False when the
        URL was already taken in this cycle. Document-level problems raise
        :class:`ParseError` immediately; record-level problems are logged and
        the record skipped.
        """

        document = self.load(raw)
        if not isinstance(document, list):
            raise ParseError(f"Descriptor list must be a JSON array, got {type(document).__name__}")
        if claim is None:
            seen: set[str] = set()

            def claim(url: str) -> bool:
                if url in seen:
                    return False
                seen.add(url)
                return True

        return self._iter_entries(document, claim)

    def _iter_entries(self, records: Iterable[Any], claim: Callable[[str], bool]) -> Iterator[Entry]:
        for index, record in enumerate(records):
            try:
                entry = self.parse_entry(record)
            except (ValueError, TypeError) as exc:
                repo_url = record.get("repo_url") if isinstance(record, dict) else None
                self.logger.error("record_parse_failed", index=index, repo_url=repo_url, error=str(exc))
                continue
            if not claim(entry.url):
                self.logger.error("duplicate_repo_url", index=index, repo_url=entry.url)
                continue
            if not entry.plugins:
                self.logger.info("repo_without_plugins", index=index, repo_url=entry.url)
                continue
            yield entry

    def parse_entry(self, record: Any) -> Entry:
        if not isinstance(record, dict):
            raise ValueError(f"record must be an object, got {type(record).__name__}")
        url = record.get("repo_url")
        if not isinstance(url, str) or not url.strip():
            raise ValueError("record has no repo_url")
        url = url.strip()
        plugins_json = record.get("plugins", [])
        if plugins_json is None:
            plugins_json = []
        if not isinstance(plugins_json, list):
            raise ValueError("plugins must be an array")
        plugins = tuple(self.parse_item(plugin, url) for plugin in plugins_json)

        owner = _text(record, "repo_developer_name")
        repo_name = _text(record, "repo_name")
        full_name = f"{owner}/{repo_name}" if owner and repo_name else repo_name
        return Entry(
            url=url,
            raw_url=derive_raw_url(url),
            plugins=plugins,
            owner=owner,
            full_name=full_name,
            git_repo_url=_text(record, "repo_source_url"),
            is_default_branch=True,
            branch_name=_text(record, "branch_name"),
        )

    def parse_item(self, record: Any, owner_url: str = "") -> Item:
        if not isinstance(record, dict):
            raise ValueError(f"plugin must be an object, got {type(record).__name__}")
        return Item(
            name=_text(record, "Name"),
            internal_name=_text(record, "InternalName"),
            author=_text(record, "Author"),
            punchline=_text(record, "Punchline"),
            description=_text(record, "Description"),
            repo_url=_text(record, "RepoUrl") or owner_url,
            api_level=_integer(record, "DalamudApiLevel", upper=MAX_API_LEVEL),
            last_update=_integer(record, "LastUpdate"),
            tags=_tags(record.get("Tags")),
            category_tags=_tags(record.get("CategoryTags")),
            is_closed_source=_flag(record, "is_closed_source"),
        )

    def parse_priority(self, raw: bytes | str) -> frozenset[str]:
        document = self.load(raw)
        if not isinstance(document, list):
            raise ParseError("Priority list must be a JSON array")
        urls = set()
        for value in document:
            if value is None:
                continue
            url = str(value).strip()
            if url:
                urls.add(url)
        return frozenset(urls)

    def parse_update_info(self, raw: bytes | str) -> RemoteUpdateInfo:
        document = self.load(raw)
        if not isinstance(document, dict):
            raise ParseError("Update metadata must be a JSON object")
        try:
            return RemoteUpdateInfo(
                updated_utc=_integer(document, "unix"),
                next_update_utc=_integer(document, "next_unix"),
            )
        except ValueError as exc:
            raise ParseError(f"Invalid update metadata: {exc}") from exc


__all__ = ["CatalogParser", "RAW_CONTENT_PREFIX", "derive_raw_url"]
