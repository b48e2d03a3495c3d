"""Retry logic with exponential backoff for upstream text extraction.

Text extraction runs out-of-process (PDF converters, OCR backends) and can
fail transiently: a converter subprocess times out, a temporary file is
still locked, a remote OCR endpoint resets the connection. This module
provides a decorator that retries those failures with exponential backoff
and jitter, while letting permanent failures (missing file, unsupported
format) propagate immediately.
"""

import functools
import inspect
import logging
import random
import time
from typing import Any, Callable, Type, TypeVar, cast

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

# Failures that will not go away by trying again
NON_RETRYABLE_EXCEPTIONS: tuple[Type[BaseException], ...] = (
    FileNotFoundError,
    IsADirectoryError,
    PermissionError,
    NotImplementedError,
    UnicodeDecodeError,
)

# Message fragments that indicate a transient failure
TRANSIENT_ERROR_MARKERS: tuple[str, ...] = (
    "timeout",
    "timed out",
    "connection",
    "temporarily unavailable",
    "resource busy",
    "try again",
)

MAX_RETRIES = 2
BASE_DELAY = 0.5  # seconds
MAX_JITTER = 0.25  # seconds


def retry_with_backoff(
    max_retries: int = MAX_RETRIES,
    base_delay: float = BASE_DELAY,
    max_jitter: float = MAX_JITTER,
    retryable_exceptions: tuple[Type[Exception], ...] = (OSError, TimeoutError),
) -> Callable[[F], F]:
    """Decorator that retries a function with exponential backoff.

    The delay before retry n (0-based) is base_delay * 2**n plus up to
    max_jitter seconds of random jitter. Works for both sync and async
    functions.

    Args:
        max_retries: Maximum number of retry attempts after the first call
        base_delay: Base delay in seconds for exponential backoff
        max_jitter: Maximum random jitter in seconds
        retryable_exceptions: Exception types considered transient

    Returns:
        Decorated function with retry logic
    """

    def _delay(attempt: int) -> float:
        return (base_delay * (2**attempt)) + (random.random() * max_jitter)

    def _give_up(func: F, attempt: int, exc: Exception) -> bool:
        if not should_retry(exc, retryable_exceptions):
            return True
        if attempt >= max_retries:
            logger.error(
                "%s failed after %d retries: %s", func.__name__, max_retries, exc
            )
            return True
        return False

    def decorator(func: F) -> F:
        @functools.wraps(func)
        async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
            import asyncio

            attempt = 0
            while True:
                try:
                    return await func(*args, **kwargs)
                except Exception as e:
                    if _give_up(func, attempt, e):
                        raise
                    delay = _delay(attempt)
                    logger.warning(
                        "%s attempt %d/%d failed: %s. Retrying in %.2fs...",
                        func.__name__, attempt + 1, max_retries, e, delay,
                    )
                    await asyncio.sleep(delay)
                    attempt += 1

        @functools.wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            attempt = 0
            while True:
                try:
                    return func(*args, **kwargs)
                except Exception as e:
                    if _give_up(func, attempt, e):
                        raise
                    delay = _delay(attempt)
                    logger.warning(
                        "%s attempt %d/%d failed: %s. Retrying in %.2fs...",
                        func.__name__, attempt + 1, max_retries, e, delay,
                    )
                    time.sleep(delay)
                    attempt += 1

        if inspect.iscoroutinefunction(func):
            return cast(F, async_wrapper)
        return cast(F, sync_wrapper)

    return decorator


def should_retry(
    exception: Exception, retryable_exceptions: tuple[Type[Exception], ...]
) -> bool:
    """Determine if an exception should trigger a retry.

    Permanent failures are never retried, even when they subclass a
    retryable type (FileNotFoundError is an OSError).
    """
    if isinstance(exception, NON_RETRYABLE_EXCEPTIONS):
        return False

    message = str(exception).lower()
    if any(marker in message for marker in TRANSIENT_ERROR_MARKERS):
        return True

    return isinstance(exception, retryable_exceptions)
