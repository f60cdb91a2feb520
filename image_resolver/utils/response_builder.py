"""
Utility for building standardized API Gateway responses with CORS headers.
"""
import json
from typing import Dict, Any, Optional

from image_resolver.utils.structured_logger import DecimalEncoder

CORS_ALLOW_HEADERS = 'authorization, x-client-info, apikey, content-type'
CORS_ALLOW_METHODS = 'POST, OPTIONS'


def cors_headers(origin: Optional[str] = None) -> Dict[str, str]:
    """
    Build CORS headers.

    Args:
        origin: Allowed request origin to echo; '*' when not given

    Returns:
        Header dict
    """
    headers = {
        'Access-Control-Allow-Origin': origin or '*',
        'Access-Control-Allow-Headers': CORS_ALLOW_HEADERS,
        'Access-Control-Allow-Methods': CORS_ALLOW_METHODS,
        'Content-Type': 'application/json',
    }
    if origin:
        headers['Vary'] = 'Origin'
    return headers


def json_response(
    status_code: int,
    body: Dict[str, Any],
    origin: Optional[str] = None
) -> Dict[str, Any]:
    """
    Build a JSON response.

    Args:
        status_code: HTTP status code
        body: Response body dict
        origin: Allowed request origin to echo in CORS headers

    Returns:
        API Gateway response dict
    """
    return {
        'statusCode': status_code,
        'headers': cors_headers(origin),
        'body': json.dumps(body, cls=DecimalEncoder)
    }


def success_response(
    body: Optional[Dict[str, Any]] = None,
    status_code: int = 200,
    origin: Optional[str] = None
) -> Dict[str, Any]:
    """Build a success response; `success: true` is added to the body."""
    payload = {'success': True}
    payload.update(body or {})
    return json_response(status_code, payload, origin)


def error_response(
    status_code: int,
    message: str,
    details: Optional[Dict[str, Any]] = None,
    origin: Optional[str] = None
) -> Dict[str, Any]:
    """
    Build error response.

    Args:
        status_code: HTTP status code
        message: Human-readable error message
        details: Optional additional error details
        origin: Allowed request origin to echo in CORS headers

    Returns:
        API Gateway response dict with `success: false`
    """
    body: Dict[str, Any] = {
        'success': False,
        'error': message
    }
    if details:
        body['details'] = details
    return json_response(status_code, body, origin)


def options_response(origin: Optional[str] = None) -> Dict[str, Any]:
    """Build the CORS preflight response (empty body)."""
    return {
        'statusCode': 200,
        'headers': cors_headers(origin),
        'body': ''
    }
