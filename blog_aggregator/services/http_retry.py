"""
Retry helper with exponential backoff

Shared by the feed adapters so every upstream call retries the same way.
"""

import logging
import time
from typing import Callable, TypeVar

from blog_aggregator.config import (
    HTTP_RETRY_ATTEMPTS,
    HTTP_RETRY_BASE_DELAY,
    HTTP_RETRY_MULTIPLIER,
)

logger = logging.getLogger(__name__)

T = TypeVar('T')


def retry_with_backoff(
    operation: Callable[[], T],
    attempts: int = HTTP_RETRY_ATTEMPTS,
    base_delay: float = HTTP_RETRY_BASE_DELAY,
    multiplier: float = HTTP_RETRY_MULTIPLIER,
    retry_on: tuple = (Exception,),
    label: str = 'operation',
) -> T:
    """
    Call operation until it succeeds or attempts run out.

    The delay before retry N (0-based) is base_delay * multiplier ** N.

    Args:
        operation: Zero-argument callable to invoke
        attempts: Total number of calls, including the first
        base_delay: Delay in seconds before the first retry
        multiplier: Growth factor applied per retry
        retry_on: Exception types that trigger a retry
        label: Name used in log messages

    Returns:
        Whatever operation returns

    Raises:
        The last exception raised by operation once attempts are exhausted
    """
    attempts = max(1, attempts)

    for attempt in range(attempts):
        try:
            return operation()
        except retry_on as e:
            if attempt == attempts - 1:
                logger.error(f"{label} failed after {attempts} attempts: {e}")
                raise
            delay = base_delay * (multiplier ** attempt)
            logger.warning(f"{label} failed (attempt {attempt + 1}/{attempts}), retrying in {delay:.1f}s: {e}")
            time.sleep(delay)
