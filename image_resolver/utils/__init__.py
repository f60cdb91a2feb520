"""
Shared utilities for image resolution handlers and services.
"""

from .graceful_degradation import with_fallback
from .metrics_emitter import MetricsEmitter
from .number_words import build_page_url, to_ordinal_name, to_page_slug
from .response_builder import (
    error_response,
    json_response,
    options_response,
    success_response,
)
from .retry import retry_operation
from .structured_logger import (
    LoggingContext,
    StructuredLogger,
    configure_lambda_logging,
    get_structured_logger,
)
from .validators import (
    ValidationError,
    extract_client_identity,
    is_domain_allowed,
    is_origin_allowed,
    validate_number,
    validate_resolve_request,
)

__all__ = [
    'with_fallback',
    'MetricsEmitter',
    'build_page_url',
    'to_ordinal_name',
    'to_page_slug',
    'error_response',
    'json_response',
    'options_response',
    'success_response',
    'retry_operation',
    'LoggingContext',
    'StructuredLogger',
    'configure_lambda_logging',
    'get_structured_logger',
    'ValidationError',
    'extract_client_identity',
    'is_domain_allowed',
    'is_origin_allowed',
    'validate_number',
    'validate_resolve_request',
]
