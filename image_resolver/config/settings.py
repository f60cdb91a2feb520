"""
Runtime settings for the image resolver.

Settings are read from the environment once per Lambda container and passed
explicitly into the services that need them, so tests can build their own
instances without touching the environment.
"""
import os
from dataclasses import dataclass, field
from typing import List, Optional
from urllib.parse import urlparse

from image_resolver.config.table_names import get_table_name
from image_resolver.exceptions import ConfigurationError

DEFAULT_SCRAPE_API_URL = 'https://api.firecrawl.dev/v1/scrape'
DEFAULT_GENERATION_API_URL = 'https://api.openai.com/v1/images/generations'
DEFAULT_WIKI_BASE_URL = 'https://numberblocks.fandom.com'
DEFAULT_IMAGES_BUCKET = 'numberblocks-images'

# Hosts that serve wiki images
WIKI_IMAGE_DOMAINS = ['static.wikia.nocookie.net']

DEFAULT_ALLOWED_ORIGINS = [
    'http://localhost:5173',
    'http://localhost:8080',
]
DEFAULT_ALLOWED_ORIGIN_SUFFIXES = ['.lovable.app']


def _split_list(value: Optional[str], default: List[str]) -> List[str]:
    if not value:
        return list(default)
    return [item.strip() for item in value.split(',') if item.strip()]


@dataclass
class ResolverSettings:
    """
    Configuration for image resolution and the request handlers.

    Attributes:
        scrape_api_key: Credential for the scrape service (required for lookups)
        generation_api_key: Credential for the image generation service
        scrape_api_url: Scrape service endpoint
        generation_api_url: Image generation endpoint
        wiki_base_url: Base URL of the wiki that pages are looked up on
        images_bucket: S3 bucket holding cached images
        region: AWS region
        public_base_url: Optional CDN/base URL for public image links
        image_cache_table: DynamoDB table for the cache index
        rate_limit_log_table: DynamoDB table for the rate limit log
        inter_batch_pause_seconds: Courtesy pause between scrape batches
        download_timeout_seconds: Timeout for a single image download
        max_image_bytes: Maximum accepted image size
        max_range_size: Maximum numbers accepted in one resolve request
        allowed_origins: Origins allowed to call the image proxy
        allowed_origin_suffixes: Origin suffixes allowed to call the image proxy
    """

    scrape_api_key: Optional[str] = None
    generation_api_key: Optional[str] = None
    scrape_api_url: str = DEFAULT_SCRAPE_API_URL
    generation_api_url: str = DEFAULT_GENERATION_API_URL
    wiki_base_url: str = DEFAULT_WIKI_BASE_URL
    images_bucket: str = DEFAULT_IMAGES_BUCKET
    region: str = 'us-east-1'
    public_base_url: Optional[str] = None
    image_cache_table: str = 'ImageCache'
    rate_limit_log_table: str = 'RateLimitLog'
    inter_batch_pause_seconds: float = 1.0
    download_timeout_seconds: float = 15.0
    max_image_bytes: int = 10 * 1024 * 1024
    max_range_size: int = 10000
    allowed_origins: List[str] = field(
        default_factory=lambda: list(DEFAULT_ALLOWED_ORIGINS)
    )
    allowed_origin_suffixes: List[str] = field(
        default_factory=lambda: list(DEFAULT_ALLOWED_ORIGIN_SUFFIXES)
    )

    def __post_init__(self):
        """Validate settings on initialization."""
        self.validate()

    def validate(self) -> None:
        """
        Validate setting ranges.

        Raises:
            ValueError: If any parameter is outside its valid range
        """
        if self.inter_batch_pause_seconds < 0:
            raise ValueError(
                f"inter_batch_pause_seconds must be non-negative, "
                f"got {self.inter_batch_pause_seconds}"
            )

        if self.download_timeout_seconds <= 0:
            raise ValueError(
                f"download_timeout_seconds must be positive, "
                f"got {self.download_timeout_seconds}"
            )

        if self.max_image_bytes < 1:
            raise ValueError(
                f"max_image_bytes must be at least 1, got {self.max_image_bytes}"
            )

        if self.max_range_size < 1:
            raise ValueError(
                f"max_range_size must be at least 1, got {self.max_range_size}"
            )

        if not self.images_bucket:
            raise ValueError("images_bucket cannot be empty")

    @classmethod
    def from_environment(cls) -> 'ResolverSettings':
        """
        Build settings from environment variables.

        Returns:
            ResolverSettings populated from the environment
        """
        return cls(
            scrape_api_key=os.getenv('FIRECRAWL_API_KEY') or None,
            generation_api_key=os.getenv('OPENAI_API_KEY') or None,
            scrape_api_url=os.getenv('FIRECRAWL_API_URL', DEFAULT_SCRAPE_API_URL),
            generation_api_url=os.getenv('OPENAI_IMAGES_URL', DEFAULT_GENERATION_API_URL),
            wiki_base_url=os.getenv('WIKI_BASE_URL', DEFAULT_WIKI_BASE_URL),
            images_bucket=os.getenv('IMAGES_BUCKET_NAME', DEFAULT_IMAGES_BUCKET),
            region=os.getenv('REGION') or os.getenv('AWS_REGION', 'us-east-1'),
            public_base_url=os.getenv('PUBLIC_IMAGE_BASE_URL') or None,
            image_cache_table=get_table_name('IMAGE_CACHE_TABLE_NAME'),
            rate_limit_log_table=get_table_name('RATE_LIMIT_LOG_TABLE_NAME'),
            inter_batch_pause_seconds=float(os.getenv('INTER_BATCH_PAUSE_SECONDS', '1.0')),
            download_timeout_seconds=float(os.getenv('DOWNLOAD_TIMEOUT_SECONDS', '15')),
            max_range_size=int(os.getenv('MAX_RANGE_SIZE', '10000')),
            allowed_origins=_split_list(
                os.getenv('ALLOWED_ORIGINS'), DEFAULT_ALLOWED_ORIGINS
            ),
            allowed_origin_suffixes=_split_list(
                os.getenv('ALLOWED_ORIGIN_SUFFIXES'), DEFAULT_ALLOWED_ORIGIN_SUFFIXES
            ),
        )

    @property
    def storage_base_url(self) -> str:
        """Base URL under which stored images are publicly readable."""
        if self.public_base_url:
            return self.public_base_url.rstrip('/')
        return f'https://{self.images_bucket}.s3.{self.region}.amazonaws.com'

    @property
    def proxy_image_domains(self) -> List[str]:
        """Hosts the image proxy may fetch from: the wiki CDN and our storage."""
        storage_host = urlparse(self.storage_base_url).hostname
        domains = list(WIKI_IMAGE_DOMAINS)
        if storage_host:
            domains.append(storage_host)
        return domains

    def require_scrape_credentials(self) -> str:
        """
        Return the scrape API key.

        Raises:
            ConfigurationError: If the key is not configured
        """
        if not self.scrape_api_key:
            raise ConfigurationError('Scrape service credential is not configured')
        return self.scrape_api_key

    def require_generation_credentials(self) -> str:
        """
        Return the generation API key.

        Raises:
            ConfigurationError: If the key is not configured
        """
        if not self.generation_api_key:
            raise ConfigurationError('OPENAI_API_KEY is not configured')
        return self.generation_api_key
