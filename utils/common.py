"""Common utilities for Quick Logcat.

This module centralises logging setup, trace identifier management and the
synchronous command helper used by the adb layer.
"""

from __future__ import annotations

import datetime as dt
import logging
import os
import platform
import subprocess
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from pathlib import Path
from typing import Iterator, List, Optional, Sequence

from config.constants import LoggingConstants


_TRACE_ID_DEFAULT = "-"
_TRACE_ID_VAR: ContextVar[str] = ContextVar("quick_logcat_trace_id", default=_TRACE_ID_DEFAULT)

# Track whether log cleanup has already run for the current day.
_logs_cleaned_today = False


class TraceIdFilter(logging.Filter):
    """Augment log records with their active trace identifier."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.trace_id = get_trace_id()
        return True


def generate_trace_id() -> str:
    """Return a new random trace identifier."""
    return uuid.uuid4().hex


def get_trace_id() -> str:
    """Return the current trace identifier ("-" when unset)."""
    return _TRACE_ID_VAR.get()


@contextmanager
def trace_id_scope(trace_id: Optional[str]) -> Iterator[None]:
    """Context manager that temporarily sets the trace identifier."""
    token = _TRACE_ID_VAR.set(trace_id or _TRACE_ID_DEFAULT)
    try:
        yield
    finally:
        _TRACE_ID_VAR.reset(token)


def _resolve_logs_dir() -> Path:
    """Return the directory path where log files should be stored."""
    system = platform.system().lower()
    home_dir = Path.home()

    if system == "linux":
        xdg_data_home = os.environ.get("XDG_DATA_HOME")
        if xdg_data_home:
            return Path(xdg_data_home) / "quick_logcat" / "logs"
        return home_dir / ".local" / "share" / "quick_logcat" / "logs"

    return home_dir / ".quick_logcat_logs"


def _cleanup_old_logs(logs_dir: Path, bootstrap_logger: logging.Logger) -> int:
    """Remove log files that do not belong to today (runs at most once per day)."""
    global _logs_cleaned_today

    if _logs_cleaned_today:
        return 0

    prefix = LoggingConstants.LOG_FILE_PREFIX
    suffix = LoggingConstants.LOG_FILE_SUFFIX

    try:
        today = dt.date.today().strftime("%Y%m%d")
        cleaned_count = 0

        for filename in os.listdir(logs_dir):
            if not (filename.startswith(prefix) and filename.endswith(suffix)):
                continue

            date_part = filename[len(prefix):len(prefix) + 8]
            if len(date_part) != 8 or not date_part.isdigit():
                continue

            if date_part == today:
                continue

            old_log_path = logs_dir / filename
            try:
                old_log_path.unlink()
                cleaned_count += 1
            except OSError:
                bootstrap_logger.exception("Error removing stale log file", extra={"stale_log": str(old_log_path)})

        _logs_cleaned_today = True
        return cleaned_count
    except OSError:
        bootstrap_logger.exception(
            "Unexpected failure while cleaning logs directory", extra={"logs_dir": str(logs_dir)}
        )
        return 0


def _ensure_logger_filters(logger: logging.Logger) -> None:
    """Attach the TraceIdFilter to the logger if not already present."""
    if any(isinstance(item, TraceIdFilter) for item in logger.filters):
        return
    logger.addFilter(TraceIdFilter())


def get_logger(name: str = "quick_logcat") -> logging.Logger:
    """Return a configured logger augmented with trace identifiers."""
    logger = logging.getLogger(name)
    _ensure_logger_filters(logger)

    if logger.handlers:
        return logger

    logs_dir = _resolve_logs_dir()
    logs_dir.mkdir(parents=True, exist_ok=True)

    bootstrap_logger = logging.getLogger("quick_logcat.bootstrap")
    if not any(isinstance(handler, logging.NullHandler) for handler in bootstrap_logger.handlers):
        bootstrap_logger.addHandler(logging.NullHandler())

    cleaned_count = _cleanup_old_logs(logs_dir, bootstrap_logger)

    current_time = dt.datetime.now().strftime("%Y%m%d_%H%M%S")
    log_filename = f"{LoggingConstants.LOG_FILE_PREFIX}{current_time}{LoggingConstants.LOG_FILE_SUFFIX}"
    log_filepath = logs_dir / log_filename

    try:
        file_handler = logging.FileHandler(log_filepath, encoding="utf-8")
    except OSError:
        fallback_dir = Path.cwd() / "logs"
        fallback_dir.mkdir(parents=True, exist_ok=True)
        log_filepath = fallback_dir / log_filename
        file_handler = logging.FileHandler(log_filepath, encoding="utf-8")

    level = getattr(logging, LoggingConstants.DEFAULT_LOG_LEVEL)

    file_handler.setLevel(level)
    file_handler.setFormatter(
        logging.Formatter(LoggingConstants.FILE_LOG_FORMAT, datefmt=LoggingConstants.DATE_FORMAT)
    )
    file_handler.addFilter(TraceIdFilter())

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(LoggingConstants.CONSOLE_LOG_FORMAT))
    console_handler.addFilter(TraceIdFilter())

    logger.addHandler(file_handler)
    logger.addHandler(console_handler)
    logger.setLevel(level)

    if cleaned_count > 0:
        logger.info("Removed %s old log file(s)", cleaned_count)

    if name == "quick_logcat":
        logger.info("Log file created: %s", log_filepath)

    return logger


_LOGGER = get_logger("common")


def run_command(command: Sequence[str], timeout: Optional[float] = None) -> subprocess.CompletedProcess:
    """Run a command without a shell and return the completed process.

    Raises:
        FileNotFoundError: The executable does not exist.
        subprocess.TimeoutExpired: The command exceeded ``timeout`` seconds.
    """
    command_list: List[str] = [str(part) for part in command]
    _LOGGER.debug("Run command: %s", command_list)
    result = subprocess.run(
        command_list,
        check=False,
        capture_output=True,
        shell=False,
        text=True,
        encoding="utf-8",
        errors="replace",
        timeout=timeout,
    )
    if result.returncode != 0:
        _LOGGER.debug("Command exited with %s: %s", result.returncode, (result.stderr or '').strip())
    return result


__all__ = [
    "TraceIdFilter",
    "generate_trace_id",
    "get_logger",
    "get_trace_id",
    "run_command",
    "trace_id_scope",
]
