"""
Short Code Generation

Random codes over the 62-symbol alphabet [A-Za-z0-9].

Codes are drawn with the secrets module so they cannot be predicted from
previous ones. Generation does not consult the store: uniqueness is decided
by the UNIQUE constraint at insert time.
"""

import secrets
import string

from shortener.core.validators import RESERVED_CODES

ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits
ALPHABET_SIZE = len(ALPHABET)


def _draw_code(min_length: int, max_length: int) -> str:
    length = min_length + secrets.randbelow(max_length - min_length + 1)
    return "".join(secrets.choice(ALPHABET) for _ in range(length))


def generate_short_code(min_length: int = 6, max_length: int = 6) -> str:
    """
    Generate a random short code.

    The length is drawn uniformly from [min_length, max_length], then every
    position is drawn uniformly from ALPHABET. Codes that collide with one of
    the app's own routes are drawn again.

    Args:
        min_length: Shortest code to produce
        max_length: Longest code to produce

    Returns:
        A random short code

    Example:
        generate_short_code(6, 6) -> "aZ3kQ9"
    """
    if min_length < 1 or min_length > max_length:
        raise ValueError(f"Invalid code length range: {min_length}..{max_length}")

    code = _draw_code(min_length, max_length)
    while code in RESERVED_CODES:
        code = _draw_code(min_length, max_length)
    return code
