"""
Lambda handler for synthetic image generation of a single number.

POST body: {"number": 1234}
Response: {"success": true, "imageUrl": "...", "aiGenerated": true}
"""
import json
from typing import Any, Dict

from image_resolver.config import ResolverSettings
from image_resolver.data_access import DynamoDBClient, ImageCacheRepository, ImageStorage
from image_resolver.exceptions import ConfigurationError
from image_resolver.services import ImageGenerationService
from image_resolver.utils import (
    MetricsEmitter,
    ValidationError,
    configure_lambda_logging,
    error_response,
    get_structured_logger,
    json_response,
    options_response,
    validate_number,
)

configure_lambda_logging()

settings = ResolverSettings.from_environment()
storage = ImageStorage(
    bucket_name=settings.images_bucket,
    public_base_url=settings.storage_base_url,
    region=settings.region
)
cache_repository = ImageCacheRepository(
    table_name=settings.image_cache_table,
    storage=storage,
    dynamodb_client=DynamoDBClient(region=settings.region)
)
metrics_emitter = MetricsEmitter()


def build_generation_service(api_key: str) -> ImageGenerationService:
    return ImageGenerationService(
        api_key=api_key,
        api_url=settings.generation_api_url,
        storage=storage,
        cache_repository=cache_repository
    )


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Generate, store and cache an image for one number.

    Returns 429 when the generation service is rate limiting, 500 on other
    generation failures and 400 for an invalid number.
    """
    method = event.get('httpMethod') or event.get('requestContext', {}).get('http', {}).get('method')
    if (method or '').upper() == 'OPTIONS':
        return options_response()

    request_logger = get_structured_logger(
        'GenerateImageHandler',
        request_id=getattr(context, 'aws_request_id', None)
    )

    try:
        try:
            api_key = settings.require_generation_credentials()
        except ConfigurationError as e:
            request_logger.error('Generation service not configured', error=e)
            return error_response(500, str(e))

        try:
            body = json.loads(event.get('body') or '{}')
        except (TypeError, ValueError):
            return error_response(400, 'Request body must be valid JSON')
        if not isinstance(body, dict):
            return error_response(400, 'Request body must be a JSON object')

        try:
            number = validate_number(body.get('number'))
        except ValidationError as e:
            return error_response(400, e.message, details={'field': e.field})

        request_logger.info(f'Generating image for {number}', operation='generate')
        result = build_generation_service(api_key).generate(number)

        metrics_emitter.emit_generation_result(result.success, result.rate_limited)
        metrics_emitter.flush()

        if result.success:
            return json_response(200, result.to_dict())
        if result.rate_limited:
            return json_response(429, result.to_dict())
        return json_response(500, result.to_dict())

    except Exception as e:
        request_logger.error('Unhandled error', error=e, exc_info=True)
        return error_response(500, 'Internal server error')
