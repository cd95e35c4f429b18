"""Backoff for Confluence API rate limits.

Only HTTP 429 is retried, following BACKOFF_DELAYS. Every other error fails
fast, including authorization failures, which the API wrapper handles with
its identity fallback instead.
"""

import time
import logging
from typing import Callable, Optional, Tuple, TypeVar

from .errors import APIAccessError

logger = logging.getLogger(__name__)

T = TypeVar('T')

# Seconds to wait before each retry; one retry per entry
BACKOFF_DELAYS: Tuple[int, ...] = (1, 2, 4)

RATE_LIMIT_PHRASES = (
    'too many requests',
    'rate limit exceeded',
    'rate limit hit',
    'rate limited',
)


def retry_on_rate_limit(func: Callable[..., T], *args, **kwargs) -> T:
    """Call ``func(*args, **kwargs)``, retrying while it is rate limited.

    Raises:
        APIAccessError: If the call is still rate limited after the last delay
        Other exceptions: Passed through immediately without retry

    Example:
        >>> page = retry_on_rate_limit(api.get_page_by_id, "123")
    """
    retries = len(BACKOFF_DELAYS)
    for attempt, delay in enumerate(BACKOFF_DELAYS + (None,)):
        try:
            return func(*args, **kwargs)
        except Exception as e:
            if not _is_rate_limit_error(e):
                raise
            if delay is None:
                logger.error(f"Still rate limited after {retries} retries, giving up")
                raise APIAccessError(
                    f"Confluence API failure (after {retries} retries)"
                ) from e
            logger.info(f"Rate limited, retry {attempt + 1}/{retries} in {delay}s")
            time.sleep(delay)

    raise APIAccessError(f"Confluence API failure (after {retries} retries)")


def _status_of(exception: Exception) -> Optional[int]:
    for candidate in (
        getattr(exception, 'status', None),
        getattr(exception, 'status_code', None),
        getattr(getattr(exception, 'response', None), 'status_code', None),
    ):
        if isinstance(candidate, int):
            return candidate
    return None


def _is_rate_limit_error(exception: Exception) -> bool:
    """True when ``exception`` looks like an HTTP 429.

    A numeric status (``status`` on our own errors, ``status_code`` or
    ``response.status_code`` on HTTP library errors) decides on its own.
    Without one, the message is searched for rate limit phrases.
    """
    status = _status_of(exception)
    if status is not None:
        return status == 429
    message = str(exception).lower()
    return any(phrase in message for phrase in RATE_LIMIT_PHRASES)
