"""
Retry logic with exponential backoff for resilient operations.
"""

import time
import random
import logging
from typing import Callable, TypeVar

from image_resolver.data_access.exceptions import RetryableError

logger = logging.getLogger(__name__)

T = TypeVar('T')


def compute_backoff_delay(
    attempt: int,
    base_delay: float,
    max_delay: float,
    jitter: bool
) -> float:
    """
    Delay before the retry following a failed attempt (0-based).

    Args:
        attempt: Index of the attempt that just failed
        base_delay: Initial delay in seconds
        max_delay: Maximum delay in seconds
        jitter: Whether to add up to 10% random jitter

    Returns:
        Delay in seconds
    """
    delay = min(base_delay * (2 ** attempt), max_delay)
    if jitter:
        delay += random.uniform(0, 0.1 * delay)
    return delay


def retry_operation(
    operation: Callable[[], T],
    max_retries: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 30.0,
    jitter: bool = True,
    sleep: Callable[[float], None] = time.sleep
) -> T:
    """
    Retry an operation with exponential backoff.

    Only RetryableError triggers a retry; any other exception propagates
    immediately.

    Args:
        operation: Callable to retry
        max_retries: Maximum number of retry attempts (default: 3)
        base_delay: Initial delay in seconds (default: 1.0)
        max_delay: Maximum delay in seconds (default: 30.0)
        jitter: Whether to add random jitter to delay (default: True)
        sleep: Sleep function, replaceable in tests

    Returns:
        Result of the operation

    Raises:
        RetryableError: If all retries fail

    Example:
        document = retry_operation(
            lambda: scrape_client.fetch_document(page_url),
            max_retries=2
        )
    """
    for attempt in range(max_retries + 1):
        try:
            result = operation()

            if attempt > 0:
                logger.info(
                    f"Operation succeeded after {attempt} retries",
                    extra={
                        'attempt': attempt,
                        'max_retries': max_retries
                    }
                )

            return result

        except RetryableError as e:
            if attempt == max_retries:
                logger.error(
                    f"Operation failed after {max_retries} retries",
                    extra={
                        'max_retries': max_retries,
                        'error': str(e)
                    }
                )
                raise

            delay = compute_backoff_delay(attempt, base_delay, max_delay, jitter)

            logger.warning(
                f"Retry attempt {attempt + 1}/{max_retries} after {delay:.2f}s",
                extra={
                    'attempt': attempt + 1,
                    'max_retries': max_retries,
                    'delay_seconds': delay,
                    'error': str(e)
                }
            )

            sleep(delay)

    raise RuntimeError('retry_operation exhausted without result')
