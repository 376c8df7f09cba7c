"""
File Log Handlers
=================

Optional file output, enabled by setting LOG_DIR:

logs/
├── app/      # everything at the configured level
└── error/    # ERROR + CRITICAL only

File naming: {category}_YYYY-MM-DD.log, rotated at midnight.
"""

import logging
import os
from datetime import datetime, timedelta
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Optional

from src.core.logging.formatters import FileFormatter, JsonFormatter

CATEGORIES = ["app", "error"]


def get_log_dir() -> Optional[Path]:
    """Base log directory, or None when file logging is disabled."""
    log_dir = os.environ.get("LOG_DIR")
    return Path(log_dir) if log_dir else None


def cleanup_old_logs(retention_days: int = 15) -> int:
    """
    Remove log files older than retention_days.

    Returns:
        Number of files deleted
    """
    base_dir = get_log_dir()
    if base_dir is None:
        return 0

    cutoff_date = datetime.now() - timedelta(days=retention_days)
    deleted_count = 0

    for category in CATEGORIES:
        for log_file in (base_dir / category).glob("*.log"):
            date_str = log_file.stem.split("_")[-1]
            try:
                file_date = datetime.strptime(date_str, "%Y-%m-%d")
            except ValueError:
                continue
            if file_date < cutoff_date:
                log_file.unlink()
                deleted_count += 1

    return deleted_count


class DailyRotatingFileHandler(TimedRotatingFileHandler):
    """Rotates at midnight into {category}_YYYY-MM-DD.log."""

    def __init__(self, base_dir: Path, category: str, retention_days: int = 15, use_json: bool = False):
        self.base_dir = base_dir
        self.category = category
        self.retention_days = retention_days

        category_dir = base_dir / category
        category_dir.mkdir(parents=True, exist_ok=True)

        super().__init__(
            filename=str(self._current_filename()),
            when="midnight",
            interval=1,
            backupCount=retention_days,
            encoding="utf-8",
        )
        self.setFormatter(JsonFormatter() if use_json else FileFormatter())

    def _current_filename(self) -> Path:
        today = datetime.now().strftime("%Y-%m-%d")
        return self.base_dir / self.category / f"{self.category}_{today}.log"

    def doRollover(self):
        if self.stream:
            self.stream.close()
            self.stream = None
        self.baseFilename = str(self._current_filename())
        self.stream = self._open()
        cleanup_old_logs(self.retention_days)


class ErrorMirrorFilter(logging.Filter):
    """Only ERROR and CRITICAL."""

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno >= logging.ERROR


def create_file_handlers(level: int, use_json: bool, retention_days: int) -> list[logging.Handler]:
    """Build the app/ and error/ handlers, or nothing when LOG_DIR is unset."""
    base_dir = get_log_dir()
    if base_dir is None:
        return []

    app_handler = DailyRotatingFileHandler(base_dir, "app", retention_days, use_json)
    app_handler.setLevel(level)

    error_handler = DailyRotatingFileHandler(base_dir, "error", retention_days, use_json)
    error_handler.setLevel(logging.ERROR)
    error_handler.addFilter(ErrorMirrorFilter())

    return [app_handler, error_handler]
