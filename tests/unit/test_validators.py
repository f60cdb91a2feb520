"""
Unit tests for request validators.
"""
import pytest

from image_resolver.utils.validators import (
    UNKNOWN_CLIENT,
    ValidationError,
    extract_client_identity,
    get_header,
    is_domain_allowed,
    is_origin_allowed,
    validate_number,
    validate_resolve_request,
)


class TestValidateResolveRequest:
    """Test suite for validate_resolve_request."""

    def test_defaults(self):
        request = validate_resolve_request({}, max_range_size=100)

        assert (request.start_number, request.end_number) == (1, 20)
        assert request.is_single_number is False

    def test_single_number_inferred(self):
        request = validate_resolve_request({'startNumber': 7, 'endNumber': 7}, 100)

        assert request.is_single_number is True

    def test_explicit_single_number_flag(self):
        request = validate_resolve_request(
            {'startNumber': 7, 'endNumber': 7, 'isSingleNumber': False}, 100
        )

        assert request.is_single_number is False

    def test_end_before_start(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_resolve_request({'startNumber': 5, 'endNumber': 4}, 100)

        assert exc_info.value.field == 'endNumber'

    def test_range_too_large(self):
        with pytest.raises(ValidationError):
            validate_resolve_request({'startNumber': 1, 'endNumber': 101}, 100)

    @pytest.mark.parametrize('value', [-1, 'ten', 1.5, True, None])
    def test_invalid_start(self, value):
        with pytest.raises(ValidationError) as exc_info:
            validate_resolve_request({'startNumber': value, 'endNumber': 20}, 100)

        assert exc_info.value.field == 'startNumber'

    def test_integral_float_accepted(self):
        assert validate_number(5.0) == 5

    def test_invalid_single_number_flag(self):
        with pytest.raises(ValidationError):
            validate_resolve_request({'isSingleNumber': 'yes'}, 100)


class TestClientIdentity:
    """Test suite for extract_client_identity."""

    def test_first_forwarded_address(self):
        headers = {'X-Forwarded-For': '203.0.113.7, 10.0.0.1'}

        assert extract_client_identity(headers) == '203.0.113.7'

    def test_cdn_header_fallback(self):
        assert extract_client_identity({'CF-Connecting-IP': '198.51.100.2'}) == '198.51.100.2'

    def test_unknown(self):
        assert extract_client_identity({}) == UNKNOWN_CLIENT
        assert extract_client_identity(None) == UNKNOWN_CLIENT

    def test_get_header_case_insensitive(self):
        assert get_header({'Origin': 'https://x'}, 'origin') == 'https://x'


class TestAllowLists:
    """Test suite for origin and domain allow-lists."""

    def test_exact_origin(self):
        assert is_origin_allowed('http://localhost:5173', ['http://localhost:5173'], [])

    def test_origin_suffix(self):
        assert is_origin_allowed('https://preview--app.lovable.app', [], ['.lovable.app'])

    def test_origin_rejected(self):
        assert not is_origin_allowed('https://evil.example.com', ['http://localhost:5173'], ['.lovable.app'])
        assert not is_origin_allowed(None, ['http://localhost:5173'], [])

    def test_domain(self):
        domains = ['static.wikia.nocookie.net']

        assert is_domain_allowed('static.wikia.nocookie.net', domains)
        assert is_domain_allowed('images.static.wikia.nocookie.net', domains)
        assert not is_domain_allowed('static.wikia.nocookie.net.evil.com', domains)
        assert not is_domain_allowed(None, domains)
