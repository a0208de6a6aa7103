"""Centralized logging helpers.

Keeps log setup in one place and provides small utilities for structured
DEBUG traces: callers pass ``extra=extra_context(...)`` so handlers that
understand the fields (JSON formatters, test captures) can read them while
the default formatter simply prints the message.
"""
from __future__ import annotations

import logging
import os
import re
import time
from typing import Any, Dict, Optional
from urllib.parse import urlsplit, urlunsplit

from crategate.constants import Constants

_CONFIGURED = False
_SECRET_RE = re.compile(r"(?i)(token|password|secret|key)=([^&\s]+)")


def configure_logging(level: Optional[str] = None) -> None:
    """Install the default root handler once.

    Args:
        level: Level name; defaults to $CRATEGATE_LOG_LEVEL or INFO.
    """
    global _CONFIGURED  # pylint: disable=global-statement
    level_name = (level or os.environ.get(Constants.LOG_LEVEL_ENV) or "INFO").upper()
    level_value = getattr(logging, level_name, logging.INFO)
    root = logging.getLogger()
    if not _CONFIGURED:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(Constants.LOG_FORMAT))
        root.addHandler(handler)
        _CONFIGURED = True
    root.setLevel(level_value)


def extra_context(**fields: Any) -> Dict[str, Any]:
    """Build an ``extra`` mapping for structured log records, dropping None values."""
    return {k: v for k, v in fields.items() if v is not None}


def is_debug_enabled(logger: logging.Logger) -> bool:
    """Return True when DEBUG records would be emitted by logger."""
    return logger.isEnabledFor(logging.DEBUG)


def redact(text: str) -> str:
    """Mask credential-looking query values in free text."""
    return _SECRET_RE.sub(lambda m: f"{m.group(1)}=[REDACTED]", text)


def safe_url(url: str) -> str:
    """Strip user credentials and redact secrets from a URL for logging."""
    try:
        parts = urlsplit(url)
    except ValueError:
        return redact(url)
    netloc = parts.netloc
    if "@" in netloc:
        netloc = "[REDACTED]@" + netloc.rsplit("@", 1)[1]
    return urlunsplit((parts.scheme, netloc, parts.path, redact(parts.query), parts.fragment))


class Timer:
    """Context manager measuring wall-clock duration."""

    def __init__(self) -> None:
        self._start = 0.0
        self._end: Optional[float] = None

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        self._end = None
        return self

    def __exit__(self, *exc: Any) -> None:
        self._end = time.perf_counter()

    def duration_ms(self) -> int:
        """Elapsed milliseconds so far, or total once the block has exited."""
        end = self._end if self._end is not None else time.perf_counter()
        return int((end - self._start) * 1000)
