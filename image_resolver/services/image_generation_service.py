"""
Synthetic image generation for numbers without a wiki image.
"""
import base64
import binascii
import logging
from typing import Optional

import requests

from image_resolver.data_access.exceptions import StorageError
from image_resolver.data_access.image_cache_repository import ImageCacheRepository
from image_resolver.data_access.image_storage import ImageStorage, generated_image_key
from image_resolver.exceptions import GenerationError, GenerationRateLimitedError
from image_resolver.models import AI_GENERATED_SENTINEL, GenerationResult
from image_resolver.services.prompt_builder import build_generation_prompt

logger = logging.getLogger(__name__)

GENERATION_MODEL = 'dall-e-3'
IMAGE_SIZE = '1024x1024'
IMAGE_QUALITY = 'standard'

RATE_LIMITED_MESSAGE = 'Rate limit exceeded. Please try again later.'
GENERATION_FAILED_MESSAGE = 'Failed to generate image'
NO_IMAGE_MESSAGE = 'No image generated'
SAVE_FAILED_MESSAGE = 'Failed to save image'


class ImageGenerationService:
    """
    Generates a character image, stores it and records it in the cache.

    Generated images are stored as ai-NNN.png and cached with the
    'ai-generated' sentinel as their source URL.
    """

    def __init__(
        self,
        api_key: str,
        api_url: str,
        storage: ImageStorage,
        cache_repository: ImageCacheRepository,
        session: Optional[requests.Session] = None,
        timeout_seconds: float = 120.0
    ):
        """
        Initialize generation service.

        Args:
            api_key: Image generation API key
            api_url: Image generation endpoint
            storage: Image storage
            cache_repository: Cache index
            session: Optional requests session for testing
            timeout_seconds: Request timeout
        """
        self.api_key = api_key
        self.api_url = api_url
        self.storage = storage
        self.cache_repository = cache_repository
        self.session = session or requests.Session()
        self.timeout_seconds = timeout_seconds

    def generate(self, number: int) -> GenerationResult:
        """
        Generate, store and cache an image for a number.

        Never raises; failures are reported in the result.

        Args:
            number: Character number

        Returns:
            GenerationResult with the public URL on success
        """
        logger.info(f"Generating AI image for {number}")
        try:
            image_bytes = self._request_image(number)
        except GenerationRateLimitedError as e:
            logger.warning(f"Generation rate limited for {number}: {e}")
            return GenerationResult(
                success=False,
                error=RATE_LIMITED_MESSAGE,
                rate_limited=True
            )
        except GenerationError as e:
            logger.error(f"Generation failed for {number}: {e}")
            return GenerationResult(success=False, error=str(e))

        key = generated_image_key(number)
        try:
            self.storage.put_image(key, image_bytes, 'image/png')
        except StorageError as e:
            logger.error(f"Failed to store generated image for {number}: {e}")
            return GenerationResult(success=False, error=SAVE_FAILED_MESSAGE)

        self.cache_repository.upsert(number, key, AI_GENERATED_SENTINEL)

        image_url = self.storage.public_url(key)
        logger.info(f"AI-generated image for {number} saved at {key}")
        return GenerationResult(success=True, image_url=image_url)

    def _request_image(self, number: int) -> bytes:
        try:
            response = self.session.post(
                self.api_url,
                headers={
                    'Authorization': f'Bearer {self.api_key}',
                    'Content-Type': 'application/json',
                },
                json={
                    'model': GENERATION_MODEL,
                    'prompt': build_generation_prompt(number),
                    'n': 1,
                    'size': IMAGE_SIZE,
                    'response_format': 'b64_json',
                    'quality': IMAGE_QUALITY,
                },
                timeout=self.timeout_seconds,
            )
        except requests.RequestException as e:
            raise GenerationError(f'{GENERATION_FAILED_MESSAGE}: {e}')

        if response.status_code == 429:
            raise GenerationRateLimitedError(RATE_LIMITED_MESSAGE)

        if not response.ok:
            logger.error(
                f"Generation service error {response.status_code}: {response.text[:500]}"
            )
            raise GenerationError(GENERATION_FAILED_MESSAGE)

        try:
            payload = response.json()
        except ValueError:
            raise GenerationError(NO_IMAGE_MESSAGE)

        images = payload.get('data') if isinstance(payload, dict) else None
        if not isinstance(images, list) or not images or not isinstance(images[0], dict):
            raise GenerationError(NO_IMAGE_MESSAGE)

        encoded = images[0].get('b64_json')
        if not isinstance(encoded, str) or not encoded:
            raise GenerationError(NO_IMAGE_MESSAGE)

        try:
            return base64.b64decode(encoded)
        except (binascii.Error, ValueError):
            raise GenerationError(NO_IMAGE_MESSAGE)
