"""
Data models for image resolution.
"""
from .image_result import ImageResult, ImageOrigin, NOT_EXPECTED_REASON
from .cache_entry import CacheEntry, AI_GENERATED_SENTINEL
from .rate_limit_event import (
    RateLimitEvent,
    RETENTION_SECONDS,
    GLOBAL_LOG_SCOPE,
    event_key_floor,
)
from .requests import ResolveRequest, GenerationResult

__all__ = [
    'ImageResult',
    'ImageOrigin',
    'NOT_EXPECTED_REASON',
    'CacheEntry',
    'AI_GENERATED_SENTINEL',
    'RateLimitEvent',
    'RETENTION_SECONDS',
    'GLOBAL_LOG_SCOPE',
    'event_key_floor',
    'ResolveRequest',
    'GenerationResult',
]
