"""
Graceful degradation utilities for handling store unavailability.
"""

import logging
from typing import Optional, Callable, TypeVar, Any
from functools import wraps

logger = logging.getLogger(__name__)

T = TypeVar('T')


def with_fallback(
    fallback_value: Any = None,
    fallback_function: Optional[Callable] = None,
    log_degradation: bool = True
):
    """
    Decorator for graceful degradation with fallback behavior.

    When the decorated function raises an exception, either returns
    a fallback value or calls a fallback function.

    Args:
        fallback_value: Value to return on failure (default: None)
        fallback_function: Function to call on failure (takes exception as arg)
        log_degradation: Whether to log degradation events (default: True)

    Returns:
        Decorated function with fallback behavior

    Example:
        @with_fallback(fallback_value=0)
        def count_recent_calls(client_identity):
            # May fail if RateLimitLog table unavailable
            return repository.sum_calls_for_client(client_identity, since_ms)
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            try:
                return func(*args, **kwargs)
            except Exception as e:
                if log_degradation:
                    logger.warning(
                        f"Graceful degradation: {func.__name__} failed, using fallback",
                        extra={
                            'function': func.__name__,
                            'error': str(e),
                            'error_type': type(e).__name__,
                            'has_fallback_function': fallback_function is not None,
                            'fallback_value': fallback_value
                        }
                    )

                if fallback_function:
                    return fallback_function(e)
                return fallback_value

        return wrapper
    return decorator
