"""Configuration loading helpers for repo-browser."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from threading import RLock
from typing import Callable

import yaml

from .models import BrowserConfig, BrowserState

CONFIG_FILENAME = "browser_config.yaml"
STATE_FILENAME = "state.json"


def _read_file(path: Path) -> dict:
    text = path.read_text(encoding="utf-8")
    if path.suffix in (".yaml", ".yml"):
        data = yaml.safe_load(text) or {}
    else:
        data = json.loads(text) if text.strip() else {}
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file must contain a mapping: {path}")
    return data


def _write_file(path: Path, payload: dict) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as stream:
        if path.suffix in (".yaml", ".yml"):
            yaml.safe_dump(payload, stream, allow_unicode=True, sort_keys=False)
        else:
            json.dump(payload, stream, indent=2, ensure_ascii=False, sort_keys=True)


@dataclass(slots=True)
class ConfigLocator:
    """Resolve important paths from the browser's home directory."""

    project_root: Path | None = None
    data_dir: Path | None = None
    cache_dir: Path | None = None
    logs_dir: Path | None = None

    def __post_init__(self) -> None:
        env_root = os.environ.get("REPO_BROWSER_HOME")
        if self.project_root is not None:
            root = Path(self.project_root).expanduser().resolve()
        elif env_root:
            root = Path(env_root).expanduser().resolve()
        else:
            root = (Path.home() / ".config" / "repo_browser").resolve()
        self.project_root = root
        self.data_dir = (root / "data").resolve()
        self.cache_dir = (self.data_dir / "cache").resolve()
        self.logs_dir = (root / "logs").resolve()
        self.ensure_directories()

    def ensure_directories(self) -> None:
        for directory in (self.data_dir, self.cache_dir, self.logs_dir):
            directory.mkdir(parents=True, exist_ok=True)

    def config_path(self) -> Path:
        return self.data_dir / CONFIG_FILENAME

    def state_path(self) -> Path:
        return self.data_dir / STATE_FILENAME


class ConfigRepository:
    """Repository encapsulating settings/state IO and schema validation."""

    def __init__(self, locator: ConfigLocator | None = None) -> None:
        self.locator = locator or ConfigLocator()
        self._config_cache: BrowserConfig | None = None
        self._state_cache: BrowserState | None = None
        self._state_lock = RLock()

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------
    def load_config(self) -> BrowserConfig:
        if self._config_cache is not None:
            return self._config_cache
        path = self.locator.config_path()
        if path.exists():
            config = BrowserConfig.model_validate(_read_file(path))
        else:
            config = BrowserConfig()
            self.save_config(config)
        self._config_cache = config
        return config

    def save_config(self, config: BrowserConfig) -> None:
        _write_file(self.locator.config_path(), config.model_dump(mode="json"))
        self._config_cache = config

    # ------------------------------------------------------------------
    # Persisted state
    # ------------------------------------------------------------------
    def load_state(self) -> BrowserState:
        with self._state_lock:
            if self._state_cache is not None:
                return self._state_cache
            path = self.locator.state_path()
            state = BrowserState.model_validate(_read_file(path)) if path.exists() else BrowserState()
            self._state_cache = state
            return state

    def save_state(self, state: BrowserState) -> None:
        with self._state_lock:
            _write_file(self.locator.state_path(), state.model_dump(mode="json"))
            self._state_cache = state

    def update_state(self, mutate: Callable[[BrowserState], None]) -> BrowserState:
        """Apply ``mutate`` to the current state and persist it under one lock."""

        with self._state_lock:
            state = self.load_state()
            mutate(state)
            self.save_state(state)
            return state


__all__ = ["CONFIG_FILENAME", "STATE_FILENAME", "ConfigLocator", "ConfigRepository"]
