"""
Lambda handler that fetches a wiki or stored image on behalf of the browser.

POST body: {"imageUrl": "https://static.wikia.nocookie.net/..."}
Response: {"success": true, "data": "<base64>", "contentType": "image/png"}
"""
import json
from typing import Any, Dict, Optional

from image_resolver.config import ResolverSettings
from image_resolver.exceptions import ImageDownloadError
from image_resolver.services import ImageFetcher
from image_resolver.utils import (
    configure_lambda_logging,
    error_response,
    get_structured_logger,
    is_origin_allowed,
    options_response,
    success_response,
)
from image_resolver.utils.validators import get_header

configure_lambda_logging()

settings = ResolverSettings.from_environment()
image_fetcher = ImageFetcher(
    timeout_seconds=settings.download_timeout_seconds,
    max_bytes=settings.max_image_bytes
)


def cors_origin_for(origin: Optional[str]) -> Optional[str]:
    """Echo an allowed origin; otherwise answer with the first configured origin."""
    if is_origin_allowed(origin, settings.allowed_origins, settings.allowed_origin_suffixes):
        return origin
    return settings.allowed_origins[0] if settings.allowed_origins else None


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Proxy an image from an allow-listed host.

    Returns 403 for a disallowed origin or host, 413 for images over the size
    limit, 504 on timeout and the upstream status for upstream errors.
    """
    headers = event.get('headers') or {}
    origin = get_header(headers, 'origin')
    cors_origin = cors_origin_for(origin)

    method = event.get('httpMethod') or event.get('requestContext', {}).get('http', {}).get('method')
    if (method or '').upper() == 'OPTIONS':
        return options_response(cors_origin)

    request_logger = get_structured_logger(
        'ProxyImageHandler',
        request_id=getattr(context, 'aws_request_id', None)
    )

    try:
        if not is_origin_allowed(origin, settings.allowed_origins, settings.allowed_origin_suffixes):
            request_logger.warning(
                'Blocked request from unauthorized origin',
                operation='proxy',
                origin=origin
            )
            return error_response(403, 'Unauthorized origin', origin=cors_origin)

        try:
            body = json.loads(event.get('body') or '{}')
        except (TypeError, ValueError):
            return error_response(400, 'Request body must be valid JSON', origin=cors_origin)

        image_url = body.get('imageUrl') if isinstance(body, dict) else None
        if not image_url:
            return error_response(400, 'Image URL is required', origin=cors_origin)

        try:
            image = image_fetcher.fetch_for_proxy(image_url, settings.proxy_image_domains)
        except ImageDownloadError as e:
            request_logger.warning(
                'Image proxy failed',
                operation='proxy',
                image_url=image_url,
                status_code=e.status_code,
                error_message=str(e)
            )
            return error_response(e.status_code, str(e), origin=cors_origin)

        request_logger.info(
            f'Proxied image, size: {len(image.data)} bytes',
            operation='proxy',
            image_url=image_url
        )
        return success_response(
            {'data': image.to_base64(), 'contentType': image.content_type},
            origin=cors_origin
        )

    except Exception as e:
        request_logger.error('Unhandled error', error=e, exc_info=True)
        return error_response(500, 'Internal server error', origin=cors_origin)
