from __future__ import annotations

import logging
import os
import sys
import threading
from collections import deque
from typing import Iterable, List

_DEFAULT_LEVEL = os.getenv("RISKROUTE_LOG_LEVEL", "INFO").upper()
_RESOLVED_LEVEL = logging.getLevelName(_DEFAULT_LEVEL)
if isinstance(_RESOLVED_LEVEL, str):
    _RESOLVED_LEVEL = logging.INFO

_BUFFER_SIZE = int(os.getenv("RISKROUTE_LOG_BUFFER", "500"))
_LOG_FORMAT = "%(asctime)s | %(levelname)s | %(run_id)s | riskroute.%(module)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_buffer_lock = threading.Lock()
_log_buffer: deque[str] = deque(maxlen=_BUFFER_SIZE)
_run_id_lock = threading.Lock()
_CURRENT_RUN_ID = "-"


class RunIdFilter(logging.Filter):
    """Inject the run_id into each log record."""
    def filter(self, record):
        record.run_id = _CURRENT_RUN_ID
        return True


class _BufferingHandler(logging.Handler):
    """Capture log records into an in-memory ring buffer."""

    def __init__(self) -> None:
        super().__init__(level=logging.DEBUG)
        self._formatter = logging.Formatter(_LOG_FORMAT, _DATE_FORMAT)

    def emit(self, record: logging.LogRecord) -> None:
        message = self._formatter.format(record)
        with _buffer_lock:
            _log_buffer.append(message)


_logging_configured = False


def _configure_logging() -> None:
    global _logging_configured
    if _logging_configured:
        return

    formatter = logging.Formatter(_LOG_FORMAT, _DATE_FORMAT)
    stream_handler = logging.StreamHandler(sys.__stderr__)
    stream_handler.setFormatter(formatter)
    stream_handler.setLevel(_RESOLVED_LEVEL)

    buffer_handler = _BufferingHandler()
    run_filter = RunIdFilter()

    package_logger = logging.getLogger("riskroute")
    package_logger.setLevel(logging.DEBUG)
    package_logger.addFilter(run_filter)
    stream_handler.addFilter(run_filter)
    buffer_handler.addFilter(run_filter)

    # 避免重复挂载 handler（测试中会多次 import）
    if not any(isinstance(h, logging.StreamHandler) and not isinstance(h, _BufferingHandler)
               for h in package_logger.handlers):
        package_logger.addHandler(stream_handler)
    if not any(isinstance(h, _BufferingHandler) for h in package_logger.handlers):
        package_logger.addHandler(buffer_handler)

    _logging_configured = True


def set_level(level: str) -> None:
    """Adjust the console handler level, e.g. from Settings.LOG_LEVEL."""
    _configure_logging()
    resolved = logging.getLevelName(level.upper())
    if isinstance(resolved, str):
        resolved = logging.INFO
    for handler in logging.getLogger("riskroute").handlers:
        if not isinstance(handler, _BufferingHandler):
            handler.setLevel(resolved)


def set_run_id(run_id: str) -> None:
    """Tag subsequent log records with ``run_id``."""
    global _CURRENT_RUN_ID
    with _run_id_lock:
        _CURRENT_RUN_ID = run_id or "-"


def get_logger(name: str) -> logging.Logger:
    """Return a logger configured with the unified riskroute format."""
    _configure_logging()
    return logging.getLogger(name)


def get_recent_output(limit: int = 200) -> List[str]:
    """Return the most recent log lines up to ``limit`` entries."""
    if limit <= 0:
        return []
    with _buffer_lock:
        return list(_log_buffer)[-limit:]


def iter_output(limit: int = 200) -> Iterable[str]:
    """Yield recent log lines without building an intermediate list."""
    for line in get_recent_output(limit):
        yield line


__all__ = [
    "RunIdFilter",
    "get_logger",
    "get_recent_output",
    "iter_output",
    "set_level",
    "set_run_id",
]
