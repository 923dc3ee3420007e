"""Pytest configuration providing record builders and shared fixtures."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Iterable

import pytest

from builders import LAST_UPDATED_URL, PRIORITY_URL, REPO_LIST_URL, FeedServer, RecordingLogger
from repo_browser.config import BrowserConfig, ConfigLocator, ConfigRepository
from repo_browser.engine.models import Entry, Item
from repo_browser.engine.parser import derive_raw_url
from repo_browser.infra import SourceCache


@pytest.fixture
def recording_logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def make_item() -> Callable[..., Item]:
    def _builder(name: str = "Foo", **overrides: Any) -> Item:
        base: dict[str, Any] = {
            "name": name,
            "internal_name": name,
            "author": "",
            "api_level": 9,
            "last_update": 100,
        }
        base.update(overrides)
        return Item(**base)

    return _builder


@pytest.fixture
def make_entry() -> Callable[..., Entry]:
    def _builder(url: str, plugins: Iterable[Item] = (), owner: str = "", **overrides: Any) -> Entry:
        base: dict[str, Any] = {
            "url": url,
            "raw_url": derive_raw_url(url),
            "plugins": tuple(plugins),
            "owner": owner,
            "full_name": f"{owner}/repo" if owner else "repo",
        }
        base.update(overrides)
        return Entry(**base)

    return _builder


@pytest.fixture
def config_repository(tmp_path: Path) -> ConfigRepository:
    repository = ConfigRepository(ConfigLocator(project_root=tmp_path))
    config = BrowserConfig.model_validate(
        {
            "endpoints": {
                "repo_list_url": REPO_LIST_URL,
                "priority_repos_url": PRIORITY_URL,
                "last_updated_url": LAST_UPDATED_URL,
            },
            "application_name": "RepoBrowserTests",
            "application_version": "2.3.4",
            "sort_countdown_ticks": 3,
        }
    )
    repository.save_config(config)
    return repository


@pytest.fixture
def source_cache(config_repository: ConfigRepository) -> SourceCache:
    return SourceCache(config_repository)


@pytest.fixture
def feed() -> FeedServer:
    return FeedServer()
