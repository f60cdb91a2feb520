"""
Request and response models for the handlers and the generation collaborator.
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class ResolveRequest:
    """
    Range-resolve request.

    Attributes:
        start_number: First number of the range (>= 0)
        end_number: Last number of the range (>= start_number)
        is_single_number: Whether generation may be used as a fallback;
            defaults to start_number == end_number
    """

    start_number: int
    end_number: int
    is_single_number: Optional[bool] = None

    def __post_init__(self):
        if self.is_single_number is None:
            self.is_single_number = self.start_number == self.end_number

    @property
    def size(self) -> int:
        return self.end_number - self.start_number + 1


@dataclass
class GenerationResult:
    """
    Outcome of a synthetic generation attempt.

    Attributes:
        success: Whether an image was generated and stored
        image_url: Public URL of the stored image
        error: Human-readable failure message
        rate_limited: True when the generation service asked us to retry later
    """

    success: bool
    image_url: Optional[str] = None
    error: Optional[str] = None
    rate_limited: bool = False

    def to_dict(self) -> Dict[str, Any]:
        if self.success:
            return {
                'success': True,
                'imageUrl': self.image_url,
                'aiGenerated': True,
            }
        return {'success': False, 'error': self.error}
