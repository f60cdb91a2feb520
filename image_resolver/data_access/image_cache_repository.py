"""
Repository for the ImageCache table (the cache index).
"""
import logging
from typing import Dict, Optional

from boto3.dynamodb.conditions import Attr

from image_resolver.models import CacheEntry

from .dynamodb_client import DynamoDBClient
from .exceptions import DynamoDBError
from .image_storage import ImageStorage

logger = logging.getLogger(__name__)

# Ranges up to this size are read with BatchGetItem; larger ranges are scanned
BATCH_LOOKUP_MAX_RANGE = 100


class ImageCacheRepository:
    """
    Repository mapping character numbers to stored images.

    Reads and writes never raise: a failing store degrades to "not cached"
    so resolution can fall through to remote lookup.
    """

    def __init__(
        self,
        table_name: str,
        storage: ImageStorage,
        dynamodb_client: Optional[DynamoDBClient] = None
    ):
        """
        Initialize ImageCache repository.

        Args:
            table_name: Name of the ImageCache table
            storage: Image storage used to derive public URLs
            dynamodb_client: Optional DynamoDB client instance
        """
        self.table_name = table_name
        self.storage = storage
        self.client = dynamodb_client or DynamoDBClient()

    def lookup_range(self, lo: int, hi: int) -> Dict[int, CacheEntry]:
        """
        Get cache entries for every cached number in [lo, hi].

        Args:
            lo: First number of the range
            hi: Last number of the range

        Returns:
            Mapping of number to CacheEntry; empty when the store is unavailable
        """
        if hi < lo:
            return {}

        try:
            if hi - lo + 1 <= BATCH_LOOKUP_MAX_RANGE:
                items = self.client.batch_get_items(
                    table_name=self.table_name,
                    keys=[{'number': n} for n in range(lo, hi + 1)]
                )
            else:
                items = self.client.scan(
                    table_name=self.table_name,
                    filter_expression=Attr('number').between(lo, hi)
                )
        except DynamoDBError as e:
            logger.warning(
                f"Cache lookup failed for {lo}-{hi}, treating as cache miss: {e}"
            )
            return {}

        entries: Dict[int, CacheEntry] = {}
        for item in items:
            try:
                entry = CacheEntry.from_item(item)
            except (KeyError, ValueError, TypeError) as e:
                logger.warning(f"Skipping malformed cache item {item}: {e}")
                continue
            if lo <= entry.number <= hi:
                entries[entry.number] = entry
        return entries

    def public_url_for(self, entry: CacheEntry) -> str:
        """
        Derive the public URL of a cached image.

        Args:
            entry: Cache entry

        Returns:
            Public URL of the stored image
        """
        return self.storage.public_url(entry.storage_locator)

    def upsert(
        self,
        number: int,
        storage_locator: str,
        original_source_url: Optional[str]
    ) -> bool:
        """
        Create or overwrite the cache entry for a number.

        Must only be called after the image bytes were written to storage.

        Args:
            number: Character number
            storage_locator: Object key of the stored image
            original_source_url: Remote source URL or the AI sentinel

        Returns:
            True if the entry was written, False if the store is unavailable
        """
        entry = CacheEntry(
            number=number,
            storage_locator=storage_locator,
            original_source_url=original_source_url,
        )
        try:
            self.client.put_item(
                table_name=self.table_name,
                item=entry.to_item()
            )
        except DynamoDBError as e:
            logger.warning(f"Failed to write cache entry for {number}: {e}")
            return False

        logger.info(f"Cached image for {number} at {storage_locator}")
        return True
