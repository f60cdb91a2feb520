"""
Object storage for cached images (Amazon S3).
"""
import logging
from typing import Optional
from urllib.parse import quote

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .exceptions import StorageError

logger = logging.getLogger(__name__)

CONTENT_TYPE_EXTENSIONS = {
    'image/png': 'png',
    'image/jpeg': 'jpg',
    'image/jpg': 'jpg',
    'image/gif': 'gif',
    'image/webp': 'webp',
}


def extension_for_content_type(content_type: Optional[str]) -> str:
    """
    Map an HTTP Content-Type to a file extension.

    Unknown or missing types default to png.
    """
    if not content_type:
        return 'png'
    media_type = content_type.split(';')[0].strip().lower()
    return CONTENT_TYPE_EXTENSIONS.get(media_type, 'png')


def scraped_image_key(number: int, content_type: Optional[str]) -> str:
    """Object key for a scraped image, e.g. '007.png'."""
    return f'{number:03d}.{extension_for_content_type(content_type)}'


def generated_image_key(number: int) -> str:
    """Object key for a generated image, e.g. 'ai-007.png'."""
    return f'ai-{number:03d}.png'


class ImageStorage:
    """
    Stores image bytes in a public S3 bucket and derives their public URLs.
    """

    def __init__(
        self,
        bucket_name: str,
        public_base_url: str,
        s3_client=None,
        region: str = 'us-east-1'
    ):
        """
        Initialize image storage.

        Args:
            bucket_name: Name of the images bucket
            public_base_url: Base URL under which objects are publicly readable
            s3_client: Optional boto3 S3 client for testing
            region: AWS region
        """
        self.bucket_name = bucket_name
        self.public_base_url = public_base_url.rstrip('/')
        self.s3 = s3_client or boto3.client('s3', region_name=region)

    def put_image(self, key: str, data: bytes, content_type: str) -> None:
        """
        Upload image bytes, overwriting any existing object.

        Args:
            key: Object key
            data: Image bytes
            content_type: MIME type stored with the object

        Raises:
            StorageError: If the upload fails
        """
        try:
            self.s3.put_object(
                Bucket=self.bucket_name,
                Key=key,
                Body=data,
                ContentType=content_type,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to upload {key} to {self.bucket_name}: {e}")
            raise StorageError(f"Failed to save image: {e}")

        logger.info(f"Stored {key} ({len(data)} bytes) in {self.bucket_name}")

    def public_url(self, key: str) -> str:
        """
        Derive the public URL of a stored object.

        Args:
            key: Object key

        Returns:
            Public URL
        """
        return f'{self.public_base_url}/{quote(key)}'
