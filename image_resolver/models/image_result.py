"""
Image result data model.

One ImageResult is produced for every number in a resolve request.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

NOT_EXPECTED_REASON = 'not expected to have wiki image'


class ImageOrigin(Enum):
    """Provenance of a resolved image."""

    CACHE = 'cache'
    FRESHLY_SCRAPED = 'freshly-scraped'
    AI_GENERATED = 'ai-generated'
    NONE = 'none'


@dataclass
class ImageResult:
    """
    Best-effort image for a single character number.

    Attributes:
        number: Character number (non-negative, unbounded)
        source_page_url: Wiki page the number is looked up on
        origin: Where the image came from
        image_url: Public image URL, present iff an image was found or generated
        failure_reason: Human-readable reason, present iff image_url is absent
    """

    number: int
    source_page_url: str
    origin: ImageOrigin = ImageOrigin.NONE
    image_url: Optional[str] = None
    failure_reason: Optional[str] = None

    def __post_init__(self):
        """Validate field constraints."""
        if self.number < 0:
            raise ValueError(f"number must be non-negative, got {self.number}")

        if not self.source_page_url:
            raise ValueError("source_page_url cannot be empty")

        if (self.image_url is None) == (self.failure_reason is None):
            raise ValueError(
                "exactly one of image_url and failure_reason must be set"
            )

        if (self.origin is ImageOrigin.NONE) != (self.image_url is None):
            raise ValueError(
                f"origin {self.origin.value} does not match image_url presence"
            )

    @classmethod
    def found(
        cls,
        number: int,
        source_page_url: str,
        image_url: str,
        origin: ImageOrigin
    ) -> 'ImageResult':
        """Build a result carrying an image."""
        return cls(
            number=number,
            source_page_url=source_page_url,
            origin=origin,
            image_url=image_url,
        )

    @classmethod
    def failed(cls, number: int, source_page_url: str, reason: str) -> 'ImageResult':
        """Build a result without an image."""
        return cls(
            number=number,
            source_page_url=source_page_url,
            failure_reason=reason or 'Unknown error',
        )

    @classmethod
    def skipped(cls, number: int, source_page_url: str) -> 'ImageResult':
        """Build the result for a number that is not worth a remote lookup."""
        return cls.failed(number, source_page_url, NOT_EXPECTED_REASON)

    @property
    def has_image(self) -> bool:
        return self.image_url is not None

    @property
    def is_skipped(self) -> bool:
        return self.failure_reason == NOT_EXPECTED_REASON

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to the wire format returned by the resolve endpoint.

        Returns:
            Dictionary with camelCase keys
        """
        data = {
            'number': self.number,
            'imageUrl': self.image_url,
            'pageUrl': self.source_page_url,
            'origin': self.origin.value,
            'cached': self.origin is ImageOrigin.CACHE,
            'aiGenerated': self.origin is ImageOrigin.AI_GENERATED,
        }
        if self.failure_reason is not None:
            data['error'] = self.failure_reason
        return data
