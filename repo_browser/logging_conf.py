"""Logging configuration built around structlog JSON logging."""

from __future__ import annotations

import logging
import logging.config
import os
from pathlib import Path

import structlog

_LOGGING_INITIALISED = False
LOGGER_NAME = "repo_browser"


def _default_log_dir() -> Path:
    env_root = os.environ.get("REPO_BROWSER_HOME")
    if env_root:
        return Path(env_root).expanduser().resolve() / "logs"
    return Path.home() / ".config" / "repo_browser" / "logs"


def configure_logging(verbose: bool = False, log_dir: Path | None = None) -> structlog.BoundLogger:
    """Configure structlog + stdlib handlers and return the application logger.

    Handlers are installed once per process; later calls only hand back the
    logger, whatever ``log_dir`` they pass.
    """

    global _LOGGING_INITIALISED

    if not _LOGGING_INITIALISED:
        log_dir = log_dir or _default_log_dir()
        log_dir.mkdir(parents=True, exist_ok=True)
        browser_log = log_dir / "browser.log"
        error_log = log_dir / "error.log"
        level = "DEBUG" if verbose else "INFO"
        logging.config.dictConfig(
            {
                "version": 1,
                "disable_existing_loggers": False,
                "formatters": {
                    "plain": {
                        "()": "pythonjsonlogger.jsonlogger.JsonFormatter",
                        "fmt": "%(asctime)s %(levelname)s %(name)s %(message)s",
                    }
                },
                "handlers": {
                    "console": {
                        "class": "logging.StreamHandler",
                        "level": level,
                        "formatter": "plain",
                    },
                    "browser_file": {
                        "class": "logging.FileHandler",
                        "level": "DEBUG" if verbose else "INFO",
                        "filename": str(browser_log),
                        "encoding": "utf-8",
                        "formatter": "plain",
                    },
                    "error_file": {
                        "class": "logging.FileHandler",
                        "level": "ERROR",
                        "filename": str(error_log),
                        "encoding": "utf-8",
                        "formatter": "plain",
                    },
                },
                "loggers": {
                    LOGGER_NAME: {
                        "handlers": ["console", "browser_file", "error_file"],
                        "level": level,
                        "propagate": False,
                    },
                },
            }
        )

        # Forward structlog events to stdlib; JSON rendering happens in the handlers.
        structlog.configure(
            processors=[
                structlog.contextvars.merge_contextvars,
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.stdlib.add_log_level,
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
            ],
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )
        _LOGGING_INITIALISED = True
    return structlog.get_logger(LOGGER_NAME)


def component_logger(component: str) -> structlog.BoundLogger:
    """Return a logger named after a component, for use when none is injected."""

    return structlog.get_logger(f"{LOGGER_NAME}.{component}").bind(component=component)


__all__ = ["configure_logging", "component_logger"]
