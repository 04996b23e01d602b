"""Shared HTTP helpers used by the registry clients.

Encapsulates timeout, retry/backoff and response caching so registry modules
avoid duplicating try/except blocks. Safe to call from worker threads.
"""
from __future__ import annotations

import logging
import threading
import time
import json
from typing import Any, Optional, Dict, Tuple

import requests

from constants import Constants
from common.errors import NetworkError, NotFound
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer

logger = logging.getLogger(__name__)

# Simple in-memory cache for HTTP responses
_http_cache: Dict[str, Tuple[Any, float]] = {}
_cache_lock = threading.Lock()

_RETRYABLE_STATUS = frozenset({429, 500, 502, 503, 504})


def _get_cache_key(
    method: str,
    url: str,
    headers: Optional[Dict[str, str]] = None,
    params: Optional[Dict[str, Any]] = None,
) -> str:
    """Generate cache key from request parameters."""
    headers_str = str(sorted(headers.items())) if headers else ""
    params_str = str(sorted(params.items())) if params else ""
    return f"{method}:{url}:{params_str}:{headers_str}"


def _is_cache_valid(cache_entry: Tuple[Any, float]) -> bool:
    """Check if cache entry is still valid."""
    _, cached_time = cache_entry
    return time.time() - cached_time < Constants.HTTP_CACHE_TTL_SEC


def clear_cache() -> None:
    """Drop every cached response."""
    with _cache_lock:
        _http_cache.clear()


def _backoff(attempt: int) -> None:
    time.sleep(Constants.HTTP_RETRY_BASE_DELAY_SEC * (2 ** attempt))


def robust_get(
    url: str,
    *,
    headers: Optional[Dict[str, str]] = None,
    **kwargs: Any
) -> Tuple[int, Dict[str, str], str]:
    """Perform GET request with timeout, retries, and caching with DEBUG traces.

    429 and 5xx responses as well as transport errors are retried with
    exponential backoff. After the last attempt the final response is
    returned; when no response was ever received the status is 0 and the
    text carries the last error.

    Returns:
        Tuple of (status_code, headers_dict, text)
    """
    request_headers = {"User-Agent": Constants.USER_AGENT}
    if headers:
        request_headers.update(headers)
    cache_key = _get_cache_key("GET", url, headers, kwargs.get("params"))
    safe_target = safe_url(url)

    with _cache_lock:
        entry = _http_cache.get(cache_key)
    if entry is not None and _is_cache_valid(entry):
        cached_data, _ = entry
        if is_debug_enabled(logger):
            logger.debug(
                "HTTP cache hit",
                extra=extra_context(
                    event="cache_hit",
                    component="http_client",
                    action="GET",
                    target=safe_target
                )
            )
        return cached_data

    last_exception = None
    last_response: Optional[Tuple[int, Dict[str, str], str]] = None

    for attempt in range(Constants.HTTP_RETRY_MAX):
        if attempt:
            _backoff(attempt - 1)
        with Timer() as t:
            try:
                if is_debug_enabled(logger):
                    logger.debug(
                        "HTTP request",
                        extra=extra_context(
                            event="http_request",
                            component="http_client",
                            action="GET",
                            target=safe_target,
                            attempt=attempt + 1
                        )
                    )

                response = requests.get(
                    url,
                    timeout=Constants.REQUEST_TIMEOUT,
                    headers=request_headers,
                    **kwargs
                )
            except requests.Timeout:
                last_exception = "timeout"
                if is_debug_enabled(logger):
                    logger.debug(
                        "HTTP timeout",
                        extra=extra_context(
                            event="http_exception",
                            component="http_client",
                            action="GET",
                            outcome="timeout",
                            attempt=attempt + 1,
                            target=safe_target
                        )
                    )
                continue
            except requests.RequestException as exc:
                last_exception = str(exc)
                if is_debug_enabled(logger):
                    logger.debug(
                        "HTTP request exception",
                        extra=extra_context(
                            event="http_exception",
                            component="http_client",
                            action="GET",
                            outcome="request_exception",
                            attempt=attempt + 1,
                            target=safe_target
                        )
                    )
                continue

            result = (response.status_code, dict(response.headers), response.text)
            if response.status_code in _RETRYABLE_STATUS:
                last_response = result
                if is_debug_enabled(logger):
                    logger.debug(
                        "HTTP retryable status",
                        extra=extra_context(
                            event="http_response",
                            component="http_client",
                            action="GET",
                            outcome="retry",
                            status_code=response.status_code,
                            attempt=attempt + 1,
                            target=safe_target
                        )
                    )
                continue

            with _cache_lock:
                _http_cache[cache_key] = (result, time.time())

            if is_debug_enabled(logger):
                logger.debug(
                    "HTTP response ok",
                    extra=extra_context(
                        event="http_response",
                        component="http_client",
                        action="GET",
                        outcome="success",
                        status_code=response.status_code,
                        duration_ms=t.duration_ms(),
                        target=safe_target
                    )
                )
            return result

    if last_response is not None:
        return last_response
    # All retries failed
    return 0, {}, f"Request failed after {Constants.HTTP_RETRY_MAX} attempts: {last_exception}"


def get_json(
    url: str,
    *,
    headers: Optional[Dict[str, str]] = None,
    **kwargs: Any
) -> Tuple[int, Dict[str, str], Optional[Any]]:
    """Perform GET request and parse JSON response with DEBUG traces.

    Args:
        url: Target URL
        headers: Optional request headers
        **kwargs: Additional requests.get parameters

    Returns:
        Tuple of (status_code, headers_dict, parsed_json_or_none)
    """
    status_code, response_headers, text = robust_get(url, headers=headers, **kwargs)

    if status_code == 200 and text:
        try:
            parsed = json.loads(text)
            if is_debug_enabled(logger):
                logger.debug(
                    "Parsed JSON response",
                    extra=extra_context(
                        event="parse",
                        component="http_client",
                        action="get_json",
                        outcome="success",
                        status_code=status_code,
                        target=safe_url(url)
                    )
                )
            return status_code, response_headers, parsed
        except json.JSONDecodeError:
            if is_debug_enabled(logger):
                logger.debug(
                    "JSON decode error",
                    extra=extra_context(
                        event="parse",
                        component="http_client",
                        action="get_json",
                        outcome="json_decode_error",
                        status_code=status_code,
                        target=safe_url(url)
                    )
                )
            return status_code, response_headers, None

    return status_code, response_headers, None


def raise_for_lookup(
    status_code: int,
    body: Any,
    *,
    package: str,
    registry: str,
    expected: type = dict,
) -> None:
    """Translate a lookup outcome into NotFound/NetworkError.

    Args:
        status_code: HTTP status (0 when no response was received).
        body: Parsed payload or text; None means the payload was unusable.
        package: Package name for the error message.
        registry: Registry display name.
        expected: Type the payload must have (a JSON object unless stated).

    Raises:
        NotFound: On 404/410.
        NetworkError: On any other non-200 status, a missing payload or one of the
            wrong type.
    """
    if status_code in (404, 410):
        raise NotFound(package, registry)
    if status_code == 0:
        raise NetworkError(package, registry, "no response from registry")
    if status_code != 200:
        raise NetworkError(package, registry, f"HTTP {status_code}")
    if body is None:
        raise NetworkError(package, registry, "invalid response payload")
    if not isinstance(body, expected):
        raise NetworkError(package, registry, f"unexpected response payload ({type(body).__name__})")
