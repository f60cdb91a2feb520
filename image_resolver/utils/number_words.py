"""
English names for character numbers.

Names follow the wiki's page titles: words joined by single spaces, tens
compounds hyphenated with a lowercase second part ("Twenty-one"), and exact
multiples of a scale word without a remainder clause ("Three Hundred").
"""
from urllib.parse import quote

ONES = [
    '', 'One', 'Two', 'Three', 'Four', 'Five', 'Six', 'Seven', 'Eight', 'Nine',
    'Ten', 'Eleven', 'Twelve', 'Thirteen', 'Fourteen', 'Fifteen', 'Sixteen',
    'Seventeen', 'Eighteen', 'Nineteen',
]
TENS = [
    '', '', 'Twenty', 'Thirty', 'Forty', 'Fifty', 'Sixty', 'Seventy',
    'Eighty', 'Ninety',
]
SCALES = [
    (1_000_000_000, 'Billion'),
    (1_000_000, 'Million'),
    (1_000, 'Thousand'),
]

# Numbers at or above this are rendered as decimal digits
NAMING_CEILING = 1_000_000_000_000


def to_ordinal_name(n: int) -> str:
    """
    Name a number in English words.

    Args:
        n: Number to name

    Returns:
        Word form (e.g. "One Hundred Twenty-three"), or the decimal digits
        for negative numbers and numbers at or above NAMING_CEILING

    Example:
        >>> to_ordinal_name(21)
        'Twenty-one'
        >>> to_ordinal_name(1000)
        'One Thousand'
    """
    if n < 0 or n >= NAMING_CEILING:
        return str(n)
    if n == 0:
        return 'Zero'
    return _name_positive(n)


def _name_positive(n: int) -> str:
    if n < 20:
        return ONES[n]

    if n < 100:
        tens, ones = divmod(n, 10)
        if ones == 0:
            return TENS[tens]
        return f'{TENS[tens]}-{ONES[ones].lower()}'

    if n < 1000:
        hundreds, remainder = divmod(n, 100)
        head = f'{ONES[hundreds]} Hundred'
        if remainder == 0:
            return head
        return f'{head} {_name_positive(remainder)}'

    for scale, word in SCALES:
        if n >= scale:
            quotient, remainder = divmod(n, scale)
            head = f'{_name_positive(quotient)} {word}'
            if remainder == 0:
                return head
            return f'{head} {_name_positive(remainder)}'

    # Unreachable for 1 <= n < NAMING_CEILING
    return str(n)


def to_page_slug(n: int) -> str:
    """
    Wiki page title for a number, with underscores for spaces.

    Hundreds pages also join the tens compound with an underscore
    (One_Hundred_Twenty_one); smaller numbers keep the hyphen (Twenty-one).
    """
    slug = to_ordinal_name(n).replace(' ', '_')
    if 100 < n < 1000:
        slug = slug.replace('-', '_')
    return slug


def build_page_url(n: int, wiki_base_url: str) -> str:
    """
    Build the wiki page URL a number is looked up on.

    Args:
        n: Character number
        wiki_base_url: Wiki root, e.g. https://numberblocks.fandom.com

    Returns:
        Page URL, e.g. https://numberblocks.fandom.com/wiki/One_Hundred
    """
    return f"{wiki_base_url.rstrip('/')}/wiki/{quote(to_page_slug(n))}"
