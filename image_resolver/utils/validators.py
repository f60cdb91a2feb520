"""
Input validation utilities for handler requests.
"""
from typing import Any, Dict, Iterable, Optional

from image_resolver.models import ResolveRequest

DEFAULT_START_NUMBER = 1
DEFAULT_END_NUMBER = 20

UNKNOWN_CLIENT = 'unknown'


class ValidationError(Exception):
    """Raised when input validation fails."""

    def __init__(self, message: str, field: Optional[str] = None):
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Field name that failed validation
        """
        super().__init__(message)
        self.field = field
        self.message = message


def _require_integer(value: Any, field_name: str) -> int:
    # bool is an int subclass but never a valid number
    if isinstance(value, bool) or not isinstance(value, int):
        if isinstance(value, float) and value.is_integer():
            return int(value)
        raise ValidationError(f'{field_name} must be an integer', field=field_name)
    return value


def validate_number(value: Any, field_name: str = 'number') -> int:
    """
    Validate a single character number.

    Args:
        value: Raw value from the request body
        field_name: Name of the field for error messages

    Returns:
        The number as int

    Raises:
        ValidationError: If missing, not an integer or negative
    """
    if value is None:
        raise ValidationError(f'{field_name} is required', field=field_name)

    number = _require_integer(value, field_name)
    if number < 0:
        raise ValidationError(f'{field_name} must be non-negative', field=field_name)
    return number


def validate_resolve_request(body: Dict[str, Any], max_range_size: int) -> ResolveRequest:
    """
    Validate a range-resolve request body.

    Missing bounds default to 1 and 20.

    Args:
        body: Parsed request body
        max_range_size: Maximum numbers accepted in one request

    Returns:
        ResolveRequest

    Raises:
        ValidationError: If bounds are invalid or the range is too large
    """
    start = validate_number(body.get('startNumber', DEFAULT_START_NUMBER), 'startNumber')
    end = validate_number(body.get('endNumber', DEFAULT_END_NUMBER), 'endNumber')

    if end < start:
        raise ValidationError(
            'endNumber must be greater than or equal to startNumber',
            field='endNumber'
        )

    if end - start + 1 > max_range_size:
        raise ValidationError(
            f'Range must contain at most {max_range_size} numbers',
            field='endNumber'
        )

    is_single = body.get('isSingleNumber')
    if is_single is not None and not isinstance(is_single, bool):
        raise ValidationError('isSingleNumber must be a boolean', field='isSingleNumber')

    return ResolveRequest(
        start_number=start,
        end_number=end,
        is_single_number=is_single,
    )


def get_header(headers: Optional[Dict[str, str]], name: str) -> Optional[str]:
    """Case-insensitive header lookup."""
    if not headers:
        return None
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() == wanted:
            return value
    return None


def extract_client_identity(headers: Optional[Dict[str, str]]) -> str:
    """
    Derive the caller identity used for rate limiting.

    Uses the first address of x-forwarded-for, then cf-connecting-ip.

    Args:
        headers: Request headers

    Returns:
        Client identity, or 'unknown'
    """
    forwarded = get_header(headers, 'x-forwarded-for')
    if forwarded:
        first = forwarded.split(',')[0].strip()
        if first:
            return first

    connecting_ip = get_header(headers, 'cf-connecting-ip')
    if connecting_ip and connecting_ip.strip():
        return connecting_ip.strip()

    return UNKNOWN_CLIENT


def is_origin_allowed(
    origin: Optional[str],
    allowed_origins: Iterable[str],
    allowed_suffixes: Iterable[str]
) -> bool:
    """
    Check a request Origin against exact origins and allowed host suffixes.

    Args:
        origin: Origin header value
        allowed_origins: Exact origins
        allowed_suffixes: Origin suffixes such as '.lovable.app'

    Returns:
        True if the origin is allowed
    """
    if not origin:
        return False
    if origin in allowed_origins:
        return True
    return any(origin.endswith(suffix) for suffix in allowed_suffixes)


def is_domain_allowed(hostname: Optional[str], allowed_domains: Iterable[str]) -> bool:
    """True if hostname equals or is a subdomain of an allowed domain."""
    if not hostname:
        return False
    hostname = hostname.lower()
    return any(
        hostname == domain or hostname.endswith('.' + domain)
        for domain in allowed_domains
    )
