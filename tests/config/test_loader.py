from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from repo_browser.config import BrowserConfig, BrowserState, ConfigLocator, ConfigRepository, SortMode


def test_config_locator_uses_env_and_creates_directories(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("REPO_BROWSER_HOME", str(tmp_path))
    locator = ConfigLocator()
    root = tmp_path.resolve()
    assert locator.project_root == root
    assert locator.data_dir == root / "data"
    assert locator.cache_dir == root / "data" / "cache"
    assert locator.logs_dir == root / "logs"
    assert locator.config_path() == root / "data" / "browser_config.yaml"
    assert locator.state_path() == root / "data" / "state.json"
    for path in (locator.data_dir, locator.cache_dir, locator.logs_dir):
        assert path.is_dir()


def test_explicit_root_wins_over_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("REPO_BROWSER_HOME", str(tmp_path / "env"))
    locator = ConfigLocator(project_root=tmp_path / "explicit")
    assert locator.project_root == (tmp_path / "explicit").resolve()


def test_missing_config_is_created_with_defaults(tmp_path: Path) -> None:
    repo = ConfigRepository(ConfigLocator(project_root=tmp_path))
    config = repo.load_config()
    assert config == BrowserConfig()
    assert repo.locator.config_path().exists()


def test_config_repository_roundtrip(tmp_path: Path) -> None:
    locator = ConfigLocator(project_root=tmp_path)
    config = BrowserConfig(sort_mode=SortMode.OWNER, cache_ttl_seconds=60, request_timeout=2.5)
    ConfigRepository(locator).save_config(config)

    on_disk = yaml.safe_load(locator.config_path().read_text(encoding="utf-8"))
    assert on_disk["sort_mode"] == 1
    assert ConfigRepository(locator).load_config() == config


def test_hand_edited_yaml_is_validated(tmp_path: Path) -> None:
    locator = ConfigLocator(project_root=tmp_path)
    locator.config_path().write_text("- not\n- a mapping\n", encoding="utf-8")
    with pytest.raises(ValueError):
        ConfigRepository(locator).load_config()


def test_state_update_persists(tmp_path: Path) -> None:
    locator = ConfigLocator(project_root=tmp_path)
    repo = ConfigRepository(locator)
    assert repo.load_state() == BrowserState()

    def mark(state: BrowserState) -> None:
        state.seen_repos.add("https://a")
        state.last_fetched["repos.json"] = 42

    repo.update_state(mark)

    reloaded = ConfigRepository(locator).load_state()
    assert reloaded.seen_repos == {"https://a"}
    assert reloaded.last_fetched == {"repos.json": 42}


def test_empty_state_file_loads_defaults(tmp_path: Path) -> None:
    locator = ConfigLocator(project_root=tmp_path)
    locator.state_path().write_text("", encoding="utf-8")
    assert ConfigRepository(locator).load_state() == BrowserState()
