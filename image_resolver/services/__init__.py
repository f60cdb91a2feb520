"""
Services for image resolution.
"""

from .admission_controller import AdmissionController, calculate_delay_ms
from .image_extractor import extract_candidate_image, strip_revision_transform
from .image_fetcher import DownloadedImage, ImageFetcher, validate_image_url
from .image_generation_service import ImageGenerationService
from .image_resolution_pipeline import (
    BATCH_SIZE,
    ImageResolutionPipeline,
    ResolutionSummary,
)
from .lookup_classifier import (
    NAMED_MAGNITUDES,
    get_character_color,
    get_small_number_arrangement,
    get_structure_guide,
    is_worth_remote_lookup,
)
from .prompt_builder import build_generation_prompt
from .scrape_client import ScrapeClient

__all__ = [
    'AdmissionController',
    'calculate_delay_ms',
    'extract_candidate_image',
    'strip_revision_transform',
    'DownloadedImage',
    'ImageFetcher',
    'validate_image_url',
    'ImageGenerationService',
    'BATCH_SIZE',
    'ImageResolutionPipeline',
    'ResolutionSummary',
    'NAMED_MAGNITUDES',
    'get_character_color',
    'get_small_number_arrangement',
    'get_structure_guide',
    'is_worth_remote_lookup',
    'build_generation_prompt',
    'ScrapeClient',
]
