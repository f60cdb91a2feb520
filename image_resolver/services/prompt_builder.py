"""
Prompt construction for synthetic character images.
"""
from image_resolver.services.lookup_classifier import (
    get_character_color,
    get_structure_guide,
)
from image_resolver.utils.number_words import to_ordinal_name


def build_generation_prompt(number: int) -> str:
    """
    Build a rule-based prompt for a line-art character image.

    The block layout is bounded by the number's magnitude tier so the model
    is never asked to draw an uncountable number of cubes literally.

    Args:
        number: Character number

    Returns:
        Prompt text
    """
    word = to_ordinal_name(number)
    label = f'{number:,}'
    counted_unit = 'each cube' if number <= 100 else 'the structural units'

    return (
        'You are drawing a Numberblocks character: a figure made of cube blocks '
        f'from the BBC show. The TOTAL number of visible blocks must EXACTLY equal {number}. '
        'One face on the front only. The number (Numberling) appears on top. '
        'Black and white line art only, for a coloring page.\n\n'
        f'CRITICAL: The NUMBER OF BLOCKS MUST BE EXACTLY {number} ({word}).\n\n'
        'BLOCK LAYOUT (MUST be clearly visible and countable):\n'
        f'{get_structure_guide(number)}\n\n'
        'VERIFICATION INSTRUCTION:\n'
        f'If you draw {counted_unit}, count them to ensure correctness.\n\n'
        'CHARACTER DESIGN:\n'
        '- The entire body is made of visible cube blocks in the arrangement above.\n'
        '- Exactly ONE face on the front of the block structure: two simple eyes and a smile.\n'
        f'- Draw the digits "{label}" on top of the character, bold and clear.\n'
        '- No arms or legs, OR very simple rounded limbs only.\n'
        f'- Use a single body color: {get_character_color(number)}. '
        'Draw as black outline only for coloring.\n\n'
        'STRICT RULES:\n'
        '- NO scenery, backgrounds, rainbows, or extra characters\n'
        f'- Number "{label}" must be on TOP of the blocks\n'
        '- Black outline ONLY, no shading, gradients, or detailed texture\n'
        '- Static image, NO animation\n\n'
        'Result: one Numberblocks character, black and white line art, '
        f'coloring page style, no background, EXACTLY {number} blocks.'
    )
