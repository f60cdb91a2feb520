"""
Cache index entry data model.
"""
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

# Marks cache entries whose bytes came from the generation service
AI_GENERATED_SENTINEL = 'ai-generated'


@dataclass
class CacheEntry:
    """
    Persisted mapping from a character number to a stored image.

    Attributes:
        number: Character number (unique key)
        storage_locator: Object key of the image within the images bucket
        original_source_url: Remote URL the bytes were fetched from, or the
            AI_GENERATED_SENTINEL for generated images
        created_at: Unix timestamp in milliseconds
    """

    number: int
    storage_locator: str
    original_source_url: Optional[str] = None
    created_at: int = field(default_factory=lambda: int(time.time() * 1000))

    def __post_init__(self):
        if self.number < 0:
            raise ValueError(f"number must be non-negative, got {self.number}")
        if not self.storage_locator:
            raise ValueError("storage_locator cannot be empty")

    @property
    def is_ai_generated(self) -> bool:
        return self.original_source_url == AI_GENERATED_SENTINEL

    def to_item(self) -> Dict[str, Any]:
        """Convert to a DynamoDB item."""
        item = {
            'number': self.number,
            'storagePath': self.storage_locator,
            'createdAt': self.created_at,
        }
        if self.original_source_url:
            item['originalUrl'] = self.original_source_url
        return item

    @classmethod
    def from_item(cls, item: Dict[str, Any]) -> 'CacheEntry':
        """
        Build an entry from a DynamoDB item.

        Numeric attributes come back from boto3 as Decimal and are
        converted to int.
        """
        return cls(
            number=int(item['number']),
            storage_locator=item['storagePath'],
            original_source_url=item.get('originalUrl'),
            created_at=int(item.get('createdAt', 0)),
        )
