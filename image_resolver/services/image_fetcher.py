"""
Bounded image downloads for caching and for the image proxy.
"""
import base64
import logging
import time
from dataclasses import dataclass
from typing import Callable, Iterable, Optional
from urllib.parse import urlparse

import requests

from image_resolver.exceptions import ImageDownloadError
from image_resolver.utils.validators import is_domain_allowed

logger = logging.getLogger(__name__)

DEFAULT_MAX_BYTES = 10 * 1024 * 1024
DEFAULT_TIMEOUT_SECONDS = 15.0
DEFAULT_CONTENT_TYPE = 'image/png'
CHUNK_SIZE = 64 * 1024

FETCH_HEADERS = {
    'User-Agent': (
        'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 '
        '(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36'
    ),
    'Referer': 'https://numberblocks.fandom.com/',
    'Accept': 'image/webp,image/apng,image/*,*/*;q=0.8',
}


@dataclass
class DownloadedImage:
    """Image bytes with their declared content type."""

    data: bytes
    content_type: str

    def to_base64(self) -> str:
        return base64.b64encode(self.data).decode('ascii')


class ImageFetcher:
    """
    Downloads images with a timeout and a size cap.

    The size cap is enforced on the declared Content-Length before the body
    is read and again on the bytes actually received. The timeout bounds the
    whole download, not just each socket read.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        max_bytes: int = DEFAULT_MAX_BYTES,
        clock: Callable[[], float] = time.monotonic
    ):
        """
        Initialize image fetcher.

        Args:
            session: Optional requests session for testing
            timeout_seconds: Per-download timeout
            max_bytes: Maximum accepted image size
            clock: Monotonic clock used for the download deadline
        """
        self.session = session or requests.Session()
        self.timeout_seconds = timeout_seconds
        self.max_bytes = max_bytes
        self.clock = clock

    def download(self, url: str) -> DownloadedImage:
        """
        Download an image.

        Args:
            url: Image URL

        Returns:
            DownloadedImage

        Raises:
            ImageDownloadError: On timeout (504), upstream error (its status),
                oversize image (413) or transport failure (502)
        """
        deadline = self.clock() + self.timeout_seconds
        try:
            response = self.session.get(
                url,
                headers=FETCH_HEADERS,
                timeout=self.timeout_seconds,
                stream=True,
            )
        except requests.Timeout:
            raise ImageDownloadError('Request timed out', status_code=504)
        except requests.RequestException as e:
            raise ImageDownloadError(f'Failed to fetch image: {e}', status_code=502)

        try:
            if not response.ok:
                raise ImageDownloadError(
                    f'Failed to fetch image: {response.status_code}',
                    status_code=response.status_code
                )

            declared = response.headers.get('content-length')
            if declared and declared.isdigit() and int(declared) > self.max_bytes:
                raise ImageDownloadError(self._too_large_message(), status_code=413)

            data = self._read_capped(response, deadline)
            content_type = response.headers.get('content-type') or DEFAULT_CONTENT_TYPE
        finally:
            response.close()

        logger.debug(f"Downloaded {url} ({len(data)} bytes, {content_type})")
        return DownloadedImage(data=data, content_type=content_type)

    def fetch_for_proxy(
        self,
        url: str,
        allowed_domains: Iterable[str]
    ) -> DownloadedImage:
        """
        Validate the target host, then download.

        Args:
            url: Image URL requested by the client
            allowed_domains: Hosts the proxy may fetch from

        Returns:
            DownloadedImage

        Raises:
            ImageDownloadError: 400 for a malformed URL, 403 for a disallowed
                host, otherwise as for download()
        """
        validate_image_url(url, allowed_domains)
        return self.download(url)

    def _read_capped(self, response: requests.Response, deadline: float) -> bytes:
        received = bytearray()
        try:
            for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                received.extend(chunk)
                if len(received) > self.max_bytes:
                    raise ImageDownloadError(self._too_large_message(), status_code=413)
                if self.clock() > deadline:
                    raise ImageDownloadError('Request timed out', status_code=504)
        except requests.Timeout:
            raise ImageDownloadError('Request timed out', status_code=504)
        except requests.RequestException as e:
            raise ImageDownloadError(f'Failed to fetch image: {e}', status_code=502)
        return bytes(received)

    def _too_large_message(self) -> str:
        return f'Image too large (max {self.max_bytes // (1024 * 1024)}MB)'


def validate_image_url(url: str, allowed_domains: Iterable[str]) -> None:
    """
    Check that an image URL is well-formed and on an allowed host.

    Raises:
        ImageDownloadError: 400 if malformed, 403 if the host is not allowed
    """
    try:
        parsed = urlparse(url)
    except ValueError:
        raise ImageDownloadError('Invalid URL format', status_code=400)

    if parsed.scheme not in ('http', 'https') or not parsed.hostname:
        raise ImageDownloadError('Invalid URL format', status_code=400)

    if not is_domain_allowed(parsed.hostname, allowed_domains):
        raise ImageDownloadError(
            f"Domain '{parsed.hostname}' is not allowed",
            status_code=403
        )
