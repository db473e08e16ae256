"""
Retry utility with exponential backoff for network operations.

Destination API calls are wrapped with this decorator so that transient
network errors and rate limiting (HTTP 429) do not fail a photo outright.
"""
import time
import logging
from typing import Callable, TypeVar, Optional, Tuple
from functools import wraps

import requests

logger = logging.getLogger(__name__)

T = TypeVar('T')

RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})


class RetryableHTTPError(Exception):
    """HTTP response whose status code is worth retrying."""
    def __init__(self, status_code: int, message: str):
        super().__init__(f"HTTP {status_code}: {message}")
        self.status_code = status_code


# Exceptions that signal a transient failure
TRANSIENT_ERRORS = (
    requests.ConnectionError,
    requests.Timeout,
    RetryableHTTPError,
)


def retry_with_backoff(
    max_retries: int = 3,
    initial_delay: float = 1.0,
    max_delay: float = 60.0,
    exponential_base: float = 2.0,
    exceptions: Tuple = (Exception,),
    on_retry: Optional[Callable[[Exception, int], None]] = None
) -> Callable:
    """
    Decorator that retries a function with exponential backoff.

    Args:
        max_retries: Maximum number of retry attempts (default: 3).
                   Total attempts = max_retries + 1.
        initial_delay: Initial delay in seconds before first retry (default: 1.0).
        max_delay: Maximum delay in seconds between retries (default: 60.0).
        exponential_base: Base for exponential backoff calculation (default: 2.0).
                         Delay = initial_delay * (exponential_base ^ attempt_number).
        exceptions: Tuple of exception types to catch and retry on (default: (Exception,)).
                   Other exceptions are re-raised immediately.
        on_retry: Optional callback function(exception, attempt_number) called on each retry.
                If None, logs a warning message automatically.

    Returns:
        Decorated function that automatically retries on specified exceptions.

    Raises:
        The last exception raised if all retry attempts fail.

    Example:
        >>> @retry_with_backoff(max_retries=3, initial_delay=1.0, exceptions=TRANSIENT_ERRORS)
        ... def create_album(session, title):
        ...     return session.post(ALBUMS_URL, json={'album': {'title': title}})
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args, **kwargs) -> T:
            last_exception = None
            delay = initial_delay

            for attempt in range(max_retries + 1):
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    last_exception = e

                    if attempt < max_retries:
                        if on_retry:
                            on_retry(e, attempt + 1)
                        else:
                            logger.warning(
                                f"{func.__name__} failed (attempt {attempt + 1}/{max_retries + 1}): {e}. "
                                f"Retrying in {delay:.1f} seconds..."
                            )

                        time.sleep(delay)
                        delay = min(delay * exponential_base, max_delay)
                    else:
                        logger.error(
                            f"{func.__name__} failed after {max_retries + 1} attempts: {e}"
                        )

            raise last_exception

        return wrapper
    return decorator
