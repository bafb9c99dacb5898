"""
Input Validators and Sanitizers

This module provides validation and sanitization functions for user inputs:
- target URLs submitted for shortening
- custom short codes requested by the client
- short codes arriving on the redirect path

Security Considerations:
- Only http/https targets are accepted (no javascript:, data:, file: ...)
- Short codes are restricted to a fixed alphabet before touching the database
- Length limits prevent oversized inputs
"""

import re
from typing import Optional
from urllib.parse import urlparse

from shortener.core.exceptions import InvalidCodeError

MAX_URL_LENGTH = 2048
MAX_SHORT_CODE_LENGTH = 20

ALLOWED_SCHEMES = {"http", "https"}

# First path segments served by the app itself; a code equal to one of these
# would be shadowed by that route on the redirect path
RESERVED_CODES = frozenset({"docs", "redoc", "health", "links", "shorten"})

_CODE_PATTERN = re.compile(r"^[0-9a-zA-Z]+$")
_CODE_WITH_SEPARATORS_PATTERN = re.compile(r"^[0-9a-zA-Z_-]+$")


def is_valid_url(url: str) -> bool:
    """
    Validate that a URL is a well-formed absolute http(s) URL.

    Args:
        url: The URL string to validate

    Returns:
        True if valid, False otherwise
    """
    if not url or not isinstance(url, str):
        return False

    if len(url) > MAX_URL_LENGTH:
        return False

    if any(ch.isspace() for ch in url):
        return False

    try:
        result = urlparse(url)

        if result.scheme.lower() not in ALLOWED_SCHEMES:
            return False

        # hostname is None for "http://" or "http://:80"
        if not result.netloc or not result.hostname:
            return False

        # Accessing .port raises ValueError for out-of-range or non-numeric ports
        result.port

        return True
    except ValueError:
        return False


def sanitize_short_code(short_code: str) -> Optional[str]:
    """
    Sanitize a short code arriving on the redirect path.

    Accepts the widest alphabet any stored code can have, so codes created
    with separators still resolve after the setting is turned off.

    Args:
        short_code: The short code to sanitize

    Returns:
        Sanitized short code if valid, None otherwise
    """
    if not short_code or not isinstance(short_code, str):
        return None

    short_code = short_code.strip()

    if not short_code or len(short_code) > MAX_SHORT_CODE_LENGTH:
        return None

    if not _CODE_WITH_SEPARATORS_PATTERN.match(short_code):
        return None

    return short_code


def sanitize_owner_id(owner_id: Optional[str], max_length: int = 64) -> Optional[str]:
    """
    Sanitize a client-supplied owner identifier.

    The identifier is an opaque scoping key, so only its shape is checked:
    non-blank, printable, at most max_length characters.

    Returns:
        The trimmed identifier if acceptable, None otherwise
    """
    if not owner_id or not isinstance(owner_id, str):
        return None

    owner_id = owner_id.strip()
    if not owner_id or len(owner_id) > max_length:
        return None

    if not owner_id.isprintable():
        return None

    return owner_id


def validate_custom_code(
    code: str,
    min_length: int = 2,
    max_length: int = 20,
    allow_separators: bool = False
) -> str:
    """
    Validate a client-requested custom code.

    Args:
        code: The requested code, already trimmed
        min_length: Minimum accepted length
        max_length: Maximum accepted length
        allow_separators: Whether '-' and '_' are accepted

    Returns:
        The code, unchanged

    Raises:
        InvalidCodeError: If the code has a bad alphabet or length, or is reserved
    """
    if not min_length <= len(code) <= max_length:
        raise InvalidCodeError(
            code,
            reason=f"Custom code must be between {min_length} and {max_length} characters"
        )

    pattern = _CODE_WITH_SEPARATORS_PATTERN if allow_separators else _CODE_PATTERN
    if not pattern.match(code):
        allowed = "letters, digits, '-' and '_'" if allow_separators else "letters and digits"
        raise InvalidCodeError(code, reason=f"Custom code may only contain {allowed}")

    if code in RESERVED_CODES:
        raise InvalidCodeError(code, reason=f"Custom code '{code}' is reserved")

    return code
