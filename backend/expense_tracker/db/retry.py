# expense_tracker/db/retry.py
"""Retry-on-transient-error wrapper for database calls.

A failure is transient when the driver says the connection is gone
(``DBAPIError.connection_invalidated`` / ``DisconnectionError``) or, as a
fallback for drivers that only report it in text, when the message contains
one of ``TRANSIENT_MARKERS``. Everything else is fatal and propagates after
a single attempt.

Backoff between attempts is ``100ms * 2**n`` (100ms, 200ms, 400ms, ...), so
an operation runs at most ``max_retries + 1`` times. The wrapped operation may
execute more than once and must be safe to repeat.
"""
import functools
import logging
import time
from typing import Callable, Optional, TypeVar

from sqlalchemy.exc import DBAPIError, DisconnectionError
from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from expense_tracker.core.config import settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

# case-sensitive on purpose: matches what drivers actually print
TRANSIENT_MARKERS = ("prepared statement", "bind message", "connection")
BASE_DELAY_SECONDS = 0.1
DEFAULT_MAX_RETRIES = settings.DB_MAX_RETRIES


def is_transient_error(exc: BaseException) -> bool:
    """Classify ``exc`` as transient (worth retrying) or fatal."""
    if isinstance(exc, DisconnectionError):
        return True
    if isinstance(exc, DBAPIError) and exc.connection_invalidated:
        return True
    message = str(exc)
    return any(marker in message for marker in TRANSIENT_MARKERS)


def with_retry(
    operation: Callable[[], T],
    max_retries: Optional[int] = None,
    *,
    sleep: Optional[Callable[[float], None]] = None,
) -> T:
    """Run ``operation()``; retry transient failures with exponential backoff.

    Raises the last error once ``max_retries`` retries are used up, and fatal
    errors immediately.
    """
    if max_retries is None:
        max_retries = DEFAULT_MAX_RETRIES
    if max_retries < 0:
        raise ValueError("max_retries must be >= 0")

    retryer = Retrying(
        retry=retry_if_exception(is_transient_error),
        stop=stop_after_attempt(max_retries + 1),
        wait=wait_exponential(multiplier=BASE_DELAY_SECONDS),
        sleep=sleep or time.sleep,
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    return retryer(operation)


def retry_on_transient(max_retries: Optional[int] = None):
    """Decorator form of :func:`with_retry` for data-access functions."""

    def decorator(fn: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(fn)
        def wrapper(*args, **kwargs) -> T:
            return with_retry(lambda: fn(*args, **kwargs), max_retries=max_retries)

        return wrapper

    return decorator
