"""
Scrape-worthiness classification and scale guides for character numbers.

The wiki only has dedicated pages for a small share of large numbers, so
remote lookups are limited to numbers likely to have one. The same magnitude
tiers drive the structure guide used when an image has to be generated.
"""
import math

# Thousand, million, billion, trillion
NAMED_MAGNITUDES = frozenset({
    1_000,
    1_000_000,
    1_000_000_000,
    1_000_000_000_000,
})

CHARACTER_COLORS = {
    1: 'red',
    2: 'orange',
    3: 'yellow',
    4: 'green',
    5: 'blue',
    6: 'purple',
    7: 'indigo',
    8: 'pink',
    9: 'teal',
    10: 'light gray or white',
}

SMALL_NUMBER_ARRANGEMENTS = {
    1: 'Exactly one cube',
    2: 'Stack of 2 cubes (vertical)',
    3: 'Stack of 3 cubes (vertical)',
    4: '2x2 square of 4 cubes',
    5: 'Stack of 5 cubes (vertical)',
    6: '2x3 vertical rectangle of 6 cubes',
    7: 'Stack of 7 cubes (vertical)',
    8: '2x4 vertical rectangle or 2x2x2 cube of 8 cubes',
    9: '3x3 square of 9 cubes',
}


def is_perfect_square(n: int) -> bool:
    return n >= 0 and math.isqrt(n) ** 2 == n


def is_power_of_two(n: int) -> bool:
    return n > 0 and n & (n - 1) == 0


def is_power_of_ten(n: int) -> bool:
    if n < 1:
        return False
    while n % 10 == 0:
        n //= 10
    return n == 1


def has_identical_digits(n: int) -> bool:
    return len(set(str(n))) == 1


def is_worth_remote_lookup(n: int) -> bool:
    """
    Decide whether a cache miss should be looked up on the wiki.

    Cache presence is the caller's concern; this predicate only looks at
    the number itself.

    Args:
        n: Character number

    Returns:
        True for every n <= 100; for 101..1000, multiples of 10, 25 or 50,
        perfect squares, powers of two and repdigits; above 1000, powers of
        ten and named magnitudes
    """
    if n <= 100:
        return True

    if n <= 1000:
        return (
            n % 10 == 0
            or n % 25 == 0
            or n % 50 == 0
            or is_perfect_square(n)
            or is_power_of_two(n)
            or has_identical_digits(n)
        )

    return is_power_of_ten(n) or n in NAMED_MAGNITUDES


def get_character_color(n: int) -> str:
    """Canonical body colour for 1-10, 'single color' otherwise."""
    return CHARACTER_COLORS.get(n, 'single color')


def get_small_number_arrangement(n: int) -> str:
    """Block arrangement for numbers below ten."""
    return SMALL_NUMBER_ARRANGEMENTS.get(n, f'{n} cubes in a compact arrangement')


def get_structure_guide(n: int) -> str:
    """
    Describe how a number's blocks should be laid out, by magnitude tier.

    Small numbers get an explicit, countable arrangement; large numbers are
    described structurally since individual cubes cannot all be drawn.

    Args:
        n: Character number

    Returns:
        Multi-line bullet list
    """
    if n <= 9:
        return (
            f'- Exactly {n} cube(s). {get_small_number_arrangement(n)}.\n'
            '- Each block is a small cube; draw so every block is clearly visible and countable.\n'
            '- The reader must be able to count every single block.'
        )

    if n == 10:
        return (
            '- Exactly 10 cubes in a clean rectangle (e.g. 2 columns of 5, or 1 row of 10).\n'
            '- Ten is the first "grouped unit"; all 10 cubes visible and countable in a unified shape.\n'
            '- Draw so every block is clearly visible.'
        )

    if n <= 99:
        tens, ones = divmod(n, 10)
        ones_text = ''
        if ones > 0:
            plural = 's' if ones > 1 else ''
            ones_text = (
                f' PLUS exactly {ones} individual single block{plural} '
                'attached separately on the side or top'
            )
        return (
            f'- Build from EXACTLY {tens} RECTANGULAR groups of ten blocks each '
            f'(each group is a 2x5 or 5x2 rectangle showing 10 blocks){ones_text}\n'
            f'- TOTAL COUNT: {tens} rectangles x 10 blocks each = {tens * 10} blocks, '
            f'PLUS {ones} individual blocks = {n} blocks total\n'
            '- Each "ten-group" MUST be a clear RECTANGLE of 10 visible cubes\n'
            f'- The {tens} ten-rectangles form the main body (stacked or side-by-side)\n'
            f'- The {ones} individual blocks attach clearly and separately\n'
            f'- All {n} blocks must be individually visible and countable'
        )

    if n == 100:
        return (
            '- Show as a large 10x10 square grid (100 blocks total)\n'
            '- The structure should signal "hundred" through its grid pattern\n'
            '- Individual cubes can be implied but the 10x10 structure must be clear'
        )

    if n <= 999:
        hundreds, remainder = divmod(n, 100)
        remainder_text = ''
        if remainder > 0:
            remainder_text = f' PLUS exactly {remainder} additional visible blocks'
        return (
            f'- Show as EXACTLY {hundreds} stacked or side-by-side 10x10 hundred-slabs '
            f'({hundreds * 100} blocks){remainder_text}\n'
            f'- TOTAL COUNT: {hundreds * 100} + {remainder} = {n} blocks\n'
            '- Each hundred-slab keeps its 10x10 grid identity\n'
            '- Extra blocks must be clearly visible and separate from the hundred-slabs'
        )

    if n <= 9999:
        thousands, remainder = divmod(n, 1000)
        extra = (
            f'Include visual indication of the extra {remainder}'
            if remainder > 0 else 'Clean thousand-block structure'
        )
        return (
            f'- Conceptualize as {thousands} "thousand-blocks" '
            '(each is a cube of 10 hundred-slabs)\n'
            '- Show the magnitude through HEIGHT and SCALE, not individual blocks\n'
            f'- {extra}\n'
            '- Use mega-blocks arranged in clean grids and balanced rectangles'
        )

    if n <= 999_999:
        return (
            '- SYMBOLIC STRUCTURE: impossible to show every cube\n'
            f'- Represent as {n // 1000:,} thousand-blocks in a massive grid or tower\n'
            '- Use repeating patterns of known shapes (tens, hundreds) to signal scale\n'
            '- WIDTH and HEIGHT show magnitude, not literal cube count'
        )

    return (
        '- PURE STRUCTURE AND SCALE representation\n'
        '- Show as a monumental tower or massive cube made of implied thousand-layers\n'
        '- Individual blocks are completely abstracted into mega-structures\n'
        '- The character should feel MASSIVE and architectural'
    )
