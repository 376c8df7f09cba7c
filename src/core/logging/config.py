"""
Logging Configuration
====================

Environment Variables:
---------------------
- LOG_LEVEL: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
- LOG_FORMAT: "json" for production, "text" for development (default)
- LOG_DIR: Enables file logs under this directory (default: console only)
- LOG_RETENTION_DAYS: Days to keep log files (default: 15)
- LOG_CONSOLE: "true" to enable console output (default: true)

Usage:
------
```python
from src.core.logging import setup_logging, get_logger

setup_logging()
logger = get_logger("news_briefing.coordinator")
```
"""

import logging
import os
import sys
from typing import Dict, Optional

from src.core.logging.formatters import DevFormatter, JsonFormatter
from src.core.logging.handlers import cleanup_old_logs, create_file_handlers

_configured_loggers: Dict[str, logging.Logger] = {}
_logging_initialized = False

NOISY_LOGGERS = [
    "httpx",
    "httpcore",
    "aiohttp",
    "asyncio",
    "openai",
]


def get_config() -> dict:
    """Get logging configuration from environment."""
    return {
        "level": os.environ.get("LOG_LEVEL", "INFO").upper(),
        "format": os.environ.get("LOG_FORMAT", "text").lower(),
        "retention_days": int(os.environ.get("LOG_RETENTION_DAYS", "15")),
        "console_enabled": os.environ.get("LOG_CONSOLE", "true").lower() == "true",
        "is_production": os.environ.get("ENV_STATE", "dev").lower() == "production",
    }


def setup_logging(
    level: Optional[str] = None,
    use_json: Optional[bool] = None,
    console: Optional[bool] = None,
) -> None:
    """
    Initialize the logging system. Safe to call more than once.

    Args:
        level: Override log level
        use_json: Override format (True for JSON, False for text)
        console: Override console output
    """
    global _logging_initialized

    if _logging_initialized:
        return

    config = get_config()
    if level:
        config["level"] = level.upper()
    if use_json is not None:
        config["format"] = "json" if use_json else "text"
    if console is not None:
        config["console_enabled"] = console

    log_level = getattr(logging, config["level"], logging.INFO)
    use_json_format = config["format"] == "json" or config["is_production"]

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    if config["console_enabled"]:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(log_level)
        console_handler.setFormatter(
            JsonFormatter() if use_json_format else DevFormatter(use_colors=sys.stdout.isatty())
        )
        root_logger.addHandler(console_handler)

    for handler in create_file_handlers(log_level, use_json_format, config["retention_days"]):
        root_logger.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))

    cleanup_old_logs(config["retention_days"])
    _logging_initialized = True

    root_logger.info(
        f"Logging initialized: level={config['level']}, "
        f"format={'json' if use_json_format else 'text'}"
    )


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a logger, initializing the logging system on first use.

    Args:
        name: Logger name (usually __name__). Defaults to "app".
    """
    if not _logging_initialized:
        setup_logging()

    name = name or "app"
    if name not in _configured_loggers:
        _configured_loggers[name] = logging.getLogger(name)
    return _configured_loggers[name]


def shutdown_logging() -> None:
    """Flush and close all handlers."""
    global _logging_initialized

    logging.shutdown()
    _configured_loggers.clear()
    _logging_initialized = False
