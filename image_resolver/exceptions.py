"""
Custom exceptions for image resolution.

Per-number failures (scrape, download, storage) are caught inside the
resolution pipeline and surfaced as a result's failure reason. Configuration
errors are fatal for the whole request.
"""


class ImageResolverError(Exception):
    """Base exception for the image resolver."""
    pass


class ConfigurationError(ImageResolverError):
    """
    Raised when a required setting or credential is missing.

    This can occur due to:
    - Missing scrape or generation API key
    - Missing bucket or table name
    """
    pass


class ScrapeError(ImageResolverError):
    """
    Raised when the remote scrape service does not return a document.

    Attributes:
        status_code: HTTP status returned by the scrape service, if any
    """

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.status_code = status_code


class ImageDownloadError(ImageResolverError):
    """
    Raised when an image cannot be fetched.

    This can occur due to:
    - Timeout while downloading
    - Non-2xx upstream response
    - Image larger than the configured limit
    - Disallowed image host
    """

    def __init__(self, message: str, status_code: int = 502):
        super().__init__(message)
        self.status_code = status_code


class GenerationError(ImageResolverError):
    """Raised when synthetic image generation fails."""
    pass


class GenerationRateLimitedError(GenerationError):
    """Raised when the generation service rejects a request with 429."""
    pass
