"""
Lambda handler for range image resolution.

POST body: {"startNumber": 1, "endNumber": 20, "isSingleNumber": false}
Response: {"success": true, "data": [ImageResult...], "delayMs": 0}
"""
import json
from typing import Any, Dict

from image_resolver.config import ResolverSettings
from image_resolver.data_access import (
    DynamoDBClient,
    ImageCacheRepository,
    ImageStorage,
    RateLimitLogRepository,
)
from image_resolver.exceptions import ConfigurationError
from image_resolver.services import (
    AdmissionController,
    ImageFetcher,
    ImageGenerationService,
    ImageResolutionPipeline,
    ScrapeClient,
)
from image_resolver.utils import (
    LoggingContext,
    MetricsEmitter,
    ValidationError,
    configure_lambda_logging,
    error_response,
    extract_client_identity,
    get_structured_logger,
    options_response,
    success_response,
    validate_resolve_request,
)

configure_lambda_logging()

# Initialized once per container
settings = ResolverSettings.from_environment()
dynamodb_client = DynamoDBClient(region=settings.region)
storage = ImageStorage(
    bucket_name=settings.images_bucket,
    public_base_url=settings.storage_base_url,
    region=settings.region
)
cache_repository = ImageCacheRepository(
    table_name=settings.image_cache_table,
    storage=storage,
    dynamodb_client=dynamodb_client
)
admission_controller = AdmissionController(
    RateLimitLogRepository(
        table_name=settings.rate_limit_log_table,
        dynamodb_client=dynamodb_client
    )
)
image_fetcher = ImageFetcher(
    timeout_seconds=settings.download_timeout_seconds,
    max_bytes=settings.max_image_bytes
)
metrics_emitter = MetricsEmitter()


def build_pipeline(scrape_api_key: str, request_logger) -> ImageResolutionPipeline:
    """
    Build the resolution pipeline for one request.

    Generation is only wired in when its credential is configured.
    """
    generator = None
    if settings.generation_api_key:
        generator = ImageGenerationService(
            api_key=settings.generation_api_key,
            api_url=settings.generation_api_url,
            storage=storage,
            cache_repository=cache_repository
        )

    return ImageResolutionPipeline(
        cache_repository=cache_repository,
        admission_controller=admission_controller,
        scrape_client=ScrapeClient(
            api_key=scrape_api_key,
            api_url=settings.scrape_api_url
        ),
        image_fetcher=image_fetcher,
        storage=storage,
        generator=generator,
        wiki_base_url=settings.wiki_base_url,
        inter_batch_pause_seconds=settings.inter_batch_pause_seconds,
        logger=request_logger
    )


def get_http_method(event: Dict[str, Any]) -> str:
    method = event.get('httpMethod')
    if not method:
        method = event.get('requestContext', {}).get('http', {}).get('method', 'POST')
    return method.upper()


def parse_body(event: Dict[str, Any]) -> Dict[str, Any]:
    """
    Parse the JSON request body.

    Raises:
        ValidationError: If the body is not a JSON object
    """
    raw = event.get('body') or '{}'
    try:
        body = json.loads(raw)
    except (TypeError, ValueError):
        raise ValidationError('Request body must be valid JSON', field='body')
    if not isinstance(body, dict):
        raise ValidationError('Request body must be a JSON object', field='body')
    return body


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Resolve images for a range of character numbers.

    Args:
        event: API Gateway proxy event
        context: Lambda context

    Returns:
        API Gateway response
    """
    if get_http_method(event) == 'OPTIONS':
        return options_response()

    client_identity = extract_client_identity(event.get('headers'))
    request_logger = get_structured_logger(
        'ResolveImagesHandler',
        request_id=getattr(context, 'aws_request_id', None),
        client_id=client_identity
    )

    try:
        try:
            scrape_api_key = settings.require_scrape_credentials()
        except ConfigurationError as e:
            request_logger.error('Scrape service not configured', error=e)
            return error_response(500, str(e))

        try:
            request = validate_resolve_request(parse_body(event), settings.max_range_size)
        except ValidationError as e:
            request_logger.warning(
                'Invalid resolve request',
                operation='validate',
                field=e.field,
                error_message=e.message
            )
            return error_response(400, e.message, details={'field': e.field})

        request_logger.info(
            f'Resolving images {request.start_number}-{request.end_number}',
            operation='resolve',
            is_single_number=request.is_single_number
        )

        pipeline = build_pipeline(scrape_api_key, request_logger)
        with LoggingContext(
            request_logger,
            'resolve_range',
            start_number=request.start_number,
            end_number=request.end_number
        ):
            results = pipeline.resolve_sync(
                request.start_number,
                request.end_number,
                request.is_single_number,
                client_identity
            )

        summary = pipeline.last_summary
        metrics_emitter.emit_resolution_summary(
            cache_hits=summary.cache_hits,
            remote_lookups=summary.scraped,
            images_found=summary.found,
            lookups_skipped=summary.skipped,
            delay_ms=summary.delay_ms
        )
        metrics_emitter.flush()

        return success_response({
            'data': [result.to_dict() for result in results],
            'delayMs': summary.delay_ms,
        })

    except Exception as e:
        request_logger.error('Unhandled error', error=e, exc_info=True)
        return error_response(500, 'Internal server error')
