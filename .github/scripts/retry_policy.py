#!/usr/bin/env python3

"""
Retry Policy
------------
Capped retry with linear backoff for network and GitHub API calls.

An operation is attempted up to `max_attempts` times. After a failed attempt
`n` that the predicate accepts, the caller sleeps `base_delay * n` seconds.
Errors the predicate rejects, and the error of the last attempt, propagate
unchanged.
"""

import logging
import time
from typing import Callable, FrozenSet, TypeVar
import requests

logger = logging.getLogger(__name__)

T = TypeVar("T")

RETRYABLE_STATUS_CODES: FrozenSet[int] = frozenset({502, 503, 504})
DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_BASE_DELAY = 1.0

def is_retryable_http_error(error: BaseException) -> bool:
    """Return True for HTTP errors carrying a 502, 503 or 504 status."""
    if not isinstance(error, requests.HTTPError):
        return False
    response = error.response
    return response is not None and response.status_code in RETRYABLE_STATUS_CODES

def with_retries(
    operation: Callable[[], T],
    label: str,
    is_retryable: Callable[[BaseException], bool] = is_retryable_http_error,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    base_delay: float = DEFAULT_BASE_DELAY,
) -> T:
    """Run `operation`, retrying qualifying failures with linear backoff."""
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")
    attempt = 1
    while True:
        try:
            return operation()
        except Exception as e:
            if attempt >= max_attempts or not is_retryable(e):
                raise
            logger.warning(f"{label} failed ({e}). Retrying ({attempt}/{max_attempts})...")
            time.sleep(base_delay * attempt)
            attempt += 1
