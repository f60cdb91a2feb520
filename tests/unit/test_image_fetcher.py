"""
Unit tests for ImageFetcher.
"""
import base64
from unittest.mock import Mock

import pytest
import requests

from image_resolver.exceptions import ImageDownloadError
from image_resolver.services.image_fetcher import ImageFetcher, validate_image_url

ALLOWED = ['static.wikia.nocookie.net']
IMAGE_URL = 'https://static.wikia.nocookie.net/numberblocks/images/a/ab/Seven.png/revision/latest'


def make_response(status_code=200, body=b'\x89PNG', headers=None):
    response = Mock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.headers = headers if headers is not None else {'content-type': 'image/png'}
    response.iter_content.return_value = [body]
    return response


@pytest.fixture
def session():
    return Mock(spec=requests.Session)


class TestDownload:
    """Test suite for ImageFetcher.download."""

    def test_success(self, session):
        session.get.return_value = make_response(
            body=b'jpegdata', headers={'content-type': 'image/jpeg'}
        )

        image = ImageFetcher(session=session).download(IMAGE_URL)

        assert image.data == b'jpegdata'
        assert image.content_type == 'image/jpeg'
        assert image.to_base64() == base64.b64encode(b'jpegdata').decode('ascii')
        assert session.get.call_args.kwargs['stream'] is True

    def test_default_content_type(self, session):
        session.get.return_value = make_response(headers={})

        assert ImageFetcher(session=session).download(IMAGE_URL).content_type == 'image/png'

    def test_timeout(self, session):
        session.get.side_effect = requests.Timeout('slow')

        with pytest.raises(ImageDownloadError) as exc_info:
            ImageFetcher(session=session).download(IMAGE_URL)

        assert exc_info.value.status_code == 504
        assert str(exc_info.value) == 'Request timed out'

    def test_connection_error(self, session):
        session.get.side_effect = requests.ConnectionError('refused')

        with pytest.raises(ImageDownloadError) as exc_info:
            ImageFetcher(session=session).download(IMAGE_URL)

        assert exc_info.value.status_code == 502

    def test_upstream_status(self, session):
        session.get.return_value = make_response(status_code=404)

        with pytest.raises(ImageDownloadError) as exc_info:
            ImageFetcher(session=session).download(IMAGE_URL)

        assert exc_info.value.status_code == 404
        assert str(exc_info.value) == 'Failed to fetch image: 404'

    def test_declared_length_too_large(self, session):
        response = make_response(headers={'content-length': str(11 * 1024 * 1024)})
        session.get.return_value = response

        with pytest.raises(ImageDownloadError) as exc_info:
            ImageFetcher(session=session).download(IMAGE_URL)

        assert exc_info.value.status_code == 413
        assert str(exc_info.value) == 'Image too large (max 10MB)'
        response.iter_content.assert_not_called()
        response.close.assert_called_once()

    def test_received_bytes_too_large(self, session):
        response = make_response(headers={})
        response.iter_content.return_value = [b'x' * 6, b'x' * 6]
        session.get.return_value = response

        with pytest.raises(ImageDownloadError) as exc_info:
            ImageFetcher(session=session, max_bytes=10).download(IMAGE_URL)

        assert exc_info.value.status_code == 413


    def test_slow_body_hits_total_deadline(self, session):
        response = make_response(headers={})
        response.iter_content.return_value = iter([b'a', b'b', b'c'])
        session.get.return_value = response
        clock = Mock(side_effect=[0.0, 0.5, 1.5, 2.5])

        with pytest.raises(ImageDownloadError) as exc_info:
            ImageFetcher(session=session, timeout_seconds=1.0, clock=clock).download(IMAGE_URL)

        assert exc_info.value.status_code == 504
        assert str(exc_info.value) == 'Request timed out'
        assert clock.call_count == 3
        response.close.assert_called_once()

    def test_fast_body_within_deadline(self, session):
        response = make_response(headers={})
        response.iter_content.return_value = [b'a', b'b']
        session.get.return_value = response
        clock = Mock(side_effect=[0.0, 0.2, 0.4])

        image = ImageFetcher(session=session, timeout_seconds=1.0, clock=clock).download(IMAGE_URL)

        assert image.data == b'ab'


class TestProxyValidation:
    """Test suite for proxy URL validation."""

    def test_allowed_domain(self, session):
        session.get.return_value = make_response()

        image = ImageFetcher(session=session).fetch_for_proxy(IMAGE_URL, ALLOWED)

        assert image.data == b'\x89PNG'

    def test_disallowed_domain(self, session):
        with pytest.raises(ImageDownloadError) as exc_info:
            ImageFetcher(session=session).fetch_for_proxy('https://evil.example.com/a.png', ALLOWED)

        assert exc_info.value.status_code == 403
        assert str(exc_info.value) == "Domain 'evil.example.com' is not allowed"
        session.get.assert_not_called()

    @pytest.mark.parametrize('url', ['not a url', 'ftp://static.wikia.nocookie.net/a.png', ''])
    def test_invalid_url(self, url):
        with pytest.raises(ImageDownloadError) as exc_info:
            validate_image_url(url, ALLOWED)

        assert exc_info.value.status_code == 400
