"""
Configuration for the image resolver.
"""
from .settings import ResolverSettings, WIKI_IMAGE_DOMAINS
from .table_names import (
    IMAGE_CACHE_TABLE_NAME,
    RATE_LIMIT_LOG_TABLE_NAME,
    RATE_LIMIT_LOG_GLOBAL_INDEX,
    get_table_name,
)

__all__ = [
    'ResolverSettings',
    'WIKI_IMAGE_DOMAINS',
    'IMAGE_CACHE_TABLE_NAME',
    'RATE_LIMIT_LOG_TABLE_NAME',
    'RATE_LIMIT_LOG_GLOBAL_INDEX',
    'get_table_name',
]
