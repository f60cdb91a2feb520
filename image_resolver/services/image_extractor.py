"""
Candidate image extraction from scraped wiki pages.

Extraction is a best-effort, regex-based rule list rather than an HTML parse:
the goal is a likely character image, and a wrong or missing pick only
degrades a single result. Rules are tried in order and the first match wins.
"""
import html
import re
from typing import Iterable, List, Optional
from urllib.parse import unquote, urlparse

from image_resolver.config import WIKI_IMAGE_DOMAINS
from image_resolver.utils.number_words import to_ordinal_name
from image_resolver.utils.validators import is_domain_allowed

# Numbers above this have no reliable infobox or word-form filename
TEMPLATE_RULES_MAX_NUMBER = 1000

DENYLIST_PATTERNS = (
    'icon',
    'logo',
    'banner',
    'placeholder',
    'avatar',
    'badge',
    'sprite',
    'favicon',
    'wordmark',
    'site-background',
    'community-header',
)

IMG_TAG_PATTERN = re.compile(r'<img\b[^>]*>', re.IGNORECASE)
IMG_SOURCE_PATTERN = re.compile(
    r'\b(data-src|src)\s*=\s*["\']([^"\']+)["\']',
    re.IGNORECASE
)
CONTAINER_PATTERNS = (
    re.compile(r'class\s*=\s*["\'][^"\']*\bpi-image\b[^"\']*["\']', re.IGNORECASE),
    re.compile(r'class\s*=\s*["\'][^"\']*\bimage image-thumbnail\b[^"\']*["\']', re.IGNORECASE),
)
REVISION_TRANSFORM_PATTERN = re.compile(r'/revision/latest/[^?#]*')
SEPARATOR_PATTERN = re.compile(r'[\s_\-]+')


def strip_revision_transform(url: str) -> str:
    """
    Collapse thumbnail transforms so the full-resolution original is returned.

    Example:
        >>> strip_revision_transform(
        ...     'https://static.wikia.nocookie.net/nb/images/a/ab/One.png'
        ...     '/revision/latest/scale-to-width-down/180?cb=1')
        'https://static.wikia.nocookie.net/nb/images/a/ab/One.png/revision/latest?cb=1'
    """
    return REVISION_TRANSFORM_PATTERN.sub('/revision/latest', url)


def image_filename(url: str) -> str:
    """Decoded file name of a wiki image URL, ignoring revision suffixes."""
    path = urlparse(url).path
    path = path.split('/revision/')[0]
    return unquote(path.rsplit('/', 1)[-1])


def _normalize_reference(url: str) -> str:
    url = html.unescape(url.strip())
    if url.startswith('//'):
        url = 'https:' + url
    return url


def _tag_sources(tag: str) -> List[str]:
    # data-src carries the real URL when src is a lazy-load placeholder
    sources = {}
    for attribute, value in IMG_SOURCE_PATTERN.findall(tag):
        value = _normalize_reference(value)
        if value.startswith('data:'):
            continue
        sources.setdefault(attribute.lower(), value)
    return [sources[key] for key in ('data-src', 'src') if key in sources]


def collect_image_references(raw_document: str) -> List[str]:
    """
    Collect every embedded image reference in document order.

    Args:
        raw_document: Scraped HTML

    Returns:
        Distinct image URLs, data URIs excluded
    """
    references: List[str] = []
    for tag in IMG_TAG_PATTERN.findall(raw_document or ''):
        for url in _tag_sources(tag):
            if url not in references:
                references.append(url)
    return references


def is_acceptable_candidate(url: str, allowed_domains: Iterable[str]) -> bool:
    """
    Check a reference against the asset denylist and the host allow-list.

    Args:
        url: Absolute image URL
        allowed_domains: Allowed content hosts (subdomains included)

    Returns:
        True if the URL may be a character image
    """
    parsed = urlparse(url)
    if parsed.scheme not in ('http', 'https'):
        return False
    if not is_domain_allowed(parsed.hostname, allowed_domains):
        return False

    path = unquote(parsed.path).lower()
    return not any(pattern in path for pattern in DENYLIST_PATTERNS)


def number_filename_pattern(number: int) -> re.Pattern:
    """Match the number as a standalone digit run, with or without separators."""
    variants = {str(number), f'{number:,}'}
    alternatives = '|'.join(
        re.escape(v) for v in sorted(variants, key=len, reverse=True)
    )
    return re.compile(rf'(?<![\d,])(?:{alternatives})(?!\d)(?!,\d)')


def word_filename_pattern(number: int) -> re.Pattern:
    """Match the number's word form, case-insensitively, any separator."""
    words = SEPARATOR_PATTERN.split(to_ordinal_name(number).lower())
    return re.compile(
        r'(?<![a-z])' + r'[\s_\-]*'.join(re.escape(w) for w in words) + r'(?![a-z])',
        re.IGNORECASE
    )


def _first_matching(
    candidates: List[str],
    pattern: re.Pattern
) -> Optional[str]:
    for url in candidates:
        if pattern.search(image_filename(url)):
            return url
    return None


def _first_in_container(
    raw_document: str,
    allowed_domains: Iterable[str]
) -> Optional[str]:
    for container in CONTAINER_PATTERNS:
        for match in container.finditer(raw_document):
            tag = IMG_TAG_PATTERN.search(raw_document, match.end())
            if not tag:
                continue
            for url in _tag_sources(tag.group(0)):
                if is_acceptable_candidate(url, allowed_domains):
                    return url
    return None


def extract_candidate_image(
    raw_document: str,
    number: int,
    allowed_domains: Iterable[str] = WIKI_IMAGE_DOMAINS
) -> Optional[str]:
    """
    Pick the most likely character image from a scraped page.

    Rules, first match wins:
    1. An allowed, non-denylisted image whose file name contains the number.
    2. For numbers up to 1000, the image of an infobox or thumbnail container.
    3. For numbers up to 1000, an allowed image named after the word form.

    Args:
        raw_document: Scraped HTML
        number: Character number the page is about
        allowed_domains: Allowed content hosts

    Returns:
        Full-resolution image URL, or None
    """
    if not raw_document:
        return None

    allowed_domains = list(allowed_domains)
    candidates = [
        url for url in collect_image_references(raw_document)
        if is_acceptable_candidate(url, allowed_domains)
    ]

    match = _first_matching(candidates, number_filename_pattern(number))

    if match is None and number <= TEMPLATE_RULES_MAX_NUMBER:
        match = _first_in_container(raw_document, allowed_domains)

    if match is None and number <= TEMPLATE_RULES_MAX_NUMBER:
        match = _first_matching(candidates, word_filename_pattern(number))

    if match is None:
        return None
    return strip_revision_transform(match)
