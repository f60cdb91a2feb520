"""
Data access layer for DynamoDB and S3 operations.
"""
from .dynamodb_client import DynamoDBClient
from .image_storage import (
    ImageStorage,
    extension_for_content_type,
    scraped_image_key,
    generated_image_key,
)
from .image_cache_repository import ImageCacheRepository
from .rate_limit_log_repository import RateLimitLogRepository
from .exceptions import (
    DynamoDBError,
    RetryableError,
    StorageError,
)

__all__ = [
    'DynamoDBClient',
    'ImageStorage',
    'extension_for_content_type',
    'scraped_image_key',
    'generated_image_key',
    'ImageCacheRepository',
    'RateLimitLogRepository',
    'DynamoDBError',
    'RetryableError',
    'StorageError',
]
