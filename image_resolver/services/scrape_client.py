"""
Client for the remote page-scrape service (Firecrawl).
"""
import logging
from typing import Optional

import requests

from image_resolver.data_access.exceptions import RetryableError
from image_resolver.exceptions import ScrapeError
from image_resolver.utils.retry import retry_operation

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}


class ScrapeClient:
    """
    Fetches rendered page HTML through the scrape service.

    429 and 5xx responses are retried with backoff; other failures raise
    ScrapeError immediately.
    """

    def __init__(
        self,
        api_key: str,
        api_url: str,
        session: Optional[requests.Session] = None,
        timeout_seconds: float = 30.0,
        max_retries: int = 2,
        retry_base_delay: float = 1.0
    ):
        """
        Initialize scrape client.

        Args:
            api_key: Scrape service API key
            api_url: Scrape endpoint URL
            session: Optional requests session for testing
            timeout_seconds: Request timeout
            max_retries: Retries for transient failures
            retry_base_delay: Initial backoff delay in seconds
        """
        self.api_key = api_key
        self.api_url = api_url
        self.session = session or requests.Session()
        self.timeout_seconds = timeout_seconds
        self.max_retries = max_retries
        self.retry_base_delay = retry_base_delay

    def fetch_document(self, page_url: str) -> str:
        """
        Fetch the HTML of a wiki page.

        Args:
            page_url: Page to scrape

        Returns:
            Raw HTML (may be empty)

        Raises:
            ScrapeError: If the service does not return a document
        """
        try:
            return retry_operation(
                lambda: self._fetch_once(page_url),
                max_retries=self.max_retries,
                base_delay=self.retry_base_delay
            )
        except RetryableError as e:
            raise ScrapeError(str(e))

    def _fetch_once(self, page_url: str) -> str:
        logger.info(f"Scraping {page_url}")
        try:
            response = self.session.post(
                self.api_url,
                headers={
                    'Authorization': f'Bearer {self.api_key}',
                    'Content-Type': 'application/json',
                },
                json={
                    'url': page_url,
                    'formats': ['html', 'links'],
                    'onlyMainContent': False,
                },
                timeout=self.timeout_seconds,
            )
        except (requests.Timeout, requests.ConnectionError) as e:
            raise RetryableError(f"Scrape request failed: {e}")
        except requests.RequestException as e:
            raise ScrapeError(f"Scrape request failed: {e}")

        payload = self._parse_json(response)

        if response.status_code in RETRYABLE_STATUS_CODES:
            raise RetryableError(
                f"Scrape service returned {response.status_code} for {page_url}"
            )

        if not response.ok:
            message = payload.get('error') or 'Request failed'
            logger.error(
                f"Scrape error for {page_url}: {response.status_code} {message}"
            )
            raise ScrapeError(message, status_code=response.status_code)

        data = payload.get('data')
        if not isinstance(data, dict):
            data = {}
        html = data.get('html') or payload.get('html')
        return html if isinstance(html, str) else ''

    @staticmethod
    def _parse_json(response: requests.Response) -> dict:
        try:
            payload = response.json()
        except ValueError:
            return {}
        return payload if isinstance(payload, dict) else {}
