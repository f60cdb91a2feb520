"""
Unit tests for ScrapeClient.
"""
from unittest.mock import Mock

import pytest
import requests

from image_resolver.exceptions import ScrapeError
from image_resolver.services.scrape_client import ScrapeClient

API_URL = 'https://api.firecrawl.dev/v1/scrape'
PAGE_URL = 'https://numberblocks.fandom.com/wiki/Seven'


def make_response(status_code=200, payload=None):
    response = Mock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.json.return_value = payload if payload is not None else {}
    return response


@pytest.fixture
def session():
    return Mock(spec=requests.Session)


@pytest.fixture
def client(session):
    return ScrapeClient('test-key', API_URL, session=session, retry_base_delay=0)


class TestScrapeClient:
    """Test suite for ScrapeClient."""

    def test_returns_html(self, client, session):
        session.post.return_value = make_response(
            payload={'success': True, 'data': {'html': '<html>7</html>'}}
        )

        assert client.fetch_document(PAGE_URL) == '<html>7</html>'

        kwargs = session.post.call_args.kwargs
        assert kwargs['headers']['Authorization'] == 'Bearer test-key'
        assert kwargs['json'] == {
            'url': PAGE_URL,
            'formats': ['html', 'links'],
            'onlyMainContent': False,
        }

    def test_top_level_html_fallback(self, client, session):
        session.post.return_value = make_response(payload={'html': '<p>x</p>'})

        assert client.fetch_document(PAGE_URL) == '<p>x</p>'

    def test_empty_document(self, client, session):
        session.post.return_value = make_response(payload={'data': {}})

        assert client.fetch_document(PAGE_URL) == ''

    @pytest.mark.parametrize('payload', [
        {'data': '<html>7</html>'},
        {'data': ['<html>7</html>']},
        {'data': {'html': 42}},
    ])
    def test_unexpected_payload_shape_is_empty_document(self, client, session, payload):
        session.post.return_value = make_response(payload=payload)

        assert client.fetch_document(PAGE_URL) == ''

    def test_client_error_not_retried(self, client, session):
        session.post.return_value = make_response(400, {'error': 'Invalid URL'})

        with pytest.raises(ScrapeError) as exc_info:
            client.fetch_document(PAGE_URL)

        assert str(exc_info.value) == 'Invalid URL'
        assert exc_info.value.status_code == 400
        assert session.post.call_count == 1

    def test_client_error_default_message(self, client, session):
        response = make_response(403)
        response.json.side_effect = ValueError('not json')
        session.post.return_value = response

        with pytest.raises(ScrapeError, match='Request failed'):
            client.fetch_document(PAGE_URL)

    def test_rate_limit_retried_then_succeeds(self, client, session):
        session.post.side_effect = [
            make_response(429),
            make_response(payload={'data': {'html': 'ok'}}),
        ]

        assert client.fetch_document(PAGE_URL) == 'ok'
        assert session.post.call_count == 2

    def test_persistent_server_error(self, client, session):
        session.post.return_value = make_response(503)

        with pytest.raises(ScrapeError):
            client.fetch_document(PAGE_URL)

        assert session.post.call_count == 3

    def test_timeout_retried(self, client, session):
        session.post.side_effect = requests.Timeout('slow')

        with pytest.raises(ScrapeError):
            client.fetch_document(PAGE_URL)

        assert session.post.call_count == 3
