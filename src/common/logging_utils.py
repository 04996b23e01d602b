"""Logging helpers shared across depup modules.

Provides root logger configuration, structured ``extra`` payloads for DEBUG
events, URL/secret redaction for log output and a small timing helper.
"""
from __future__ import annotations

import logging
import re
import sys
import time
from typing import Any, Dict, Optional
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from constants import Constants

_SENSITIVE_PARAMS = ("token", "key", "secret", "password", "auth", "signature")
_REDACTED = "[REDACTED]"
_TOKEN_PATTERN = re.compile(r"(?i)(bearer\s+|token[=:]\s*)([A-Za-z0-9._\-]+)")


def configure_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> None:
    """Configure the root logger once for CLI use.

    Console output goes to stderr so stdout stays reserved for rendered
    results (text, JSON or diff).

    Args:
        level: Root log level.
        log_file: Optional path for an additional file handler.
    """
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(logging.Formatter(Constants.LOG_FORMAT))
    root.addHandler(console)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(Constants.LOG_FILE_FORMAT))
        root.addHandler(file_handler)

    root.setLevel(level)


def is_debug_enabled(logger: logging.Logger) -> bool:
    """Return True when DEBUG records would be emitted for logger."""
    return logger.isEnabledFor(logging.DEBUG)


def extra_context(**fields: Any) -> Dict[str, Any]:
    """Build an ``extra`` mapping for structured log records, dropping None values."""
    return {key: value for key, value in fields.items() if value is not None}


def redact(text: str) -> str:
    """Mask bearer tokens and token=... fragments in free text."""
    if not text:
        return text
    return _TOKEN_PATTERN.sub(lambda m: m.group(1) + _REDACTED, text)


def safe_url(url: str) -> str:
    """Return url with credentials and sensitive query parameters masked."""
    try:
        parts = urlsplit(url)
    except ValueError:
        return redact(url)

    netloc = parts.netloc
    if "@" in netloc:
        netloc = _REDACTED + "@" + netloc.split("@", 1)[1]

    query = parts.query
    if query:
        pairs = []
        for key, value in parse_qsl(query, keep_blank_values=True):
            if any(marker in key.lower() for marker in _SENSITIVE_PARAMS):
                value = _REDACTED
            pairs.append((key, value))
        query = urlencode(pairs, safe=":+")

    return urlunsplit((parts.scheme, netloc, parts.path, query, parts.fragment))


class Timer:
    """Context manager measuring wall-clock duration."""

    def __init__(self) -> None:
        self._start = 0.0
        self._end: Optional[float] = None

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        self._end = None
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self._end = time.perf_counter()

    def duration_ms(self) -> float:
        """Elapsed milliseconds, measured up to now while the block is still running."""
        end = self._end if self._end is not None else time.perf_counter()
        return round((end - self._start) * 1000.0, 2)
