"""
DynamoDB table name constants.

This module provides centralized table name constants so the request
handlers and repositories agree on table names.
"""
import os
from typing import Optional

# Image cache index: number -> stored image locator
IMAGE_CACHE_TABLE_NAME = 'ImageCache'

# Append-only log of remote scrape calls used for admission control
RATE_LIMIT_LOG_TABLE_NAME = 'RateLimitLog'

# Global secondary index on the rate limit log (logScope + eventKey)
RATE_LIMIT_LOG_GLOBAL_INDEX = 'logScope-eventKey-index'

TABLE_NAME_ENV_VARS = {
    'IMAGE_CACHE_TABLE_NAME': IMAGE_CACHE_TABLE_NAME,
    'RATE_LIMIT_LOG_TABLE_NAME': RATE_LIMIT_LOG_TABLE_NAME,
}


def get_table_name(table_key: str, default: Optional[str] = None) -> str:
    """
    Get table name from environment variable or use default constant.

    Supports both the ``_TABLE_NAME`` naming convention and the shorter
    ``_TABLE`` form.

    Args:
        table_key: Environment variable key (e.g., 'IMAGE_CACHE_TABLE_NAME')
        default: Default table name if environment variable not set

    Returns:
        Table name from environment or default

    Example:
        >>> os.environ['IMAGE_CACHE_TABLE_NAME'] = 'ImageCache-dev'
        >>> get_table_name('IMAGE_CACHE_TABLE_NAME')
        'ImageCache-dev'
    """
    if default is None:
        default = TABLE_NAME_ENV_VARS.get(table_key, '')

    value = os.getenv(table_key)
    if value:
        return value

    legacy_key = table_key.replace('_TABLE_NAME', '_TABLE')
    value = os.getenv(legacy_key)
    if value:
        return value

    return default
