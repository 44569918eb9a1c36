"""Validation helpers for short link creation."""

import re
from typing import Tuple
from urllib.parse import urlparse

MAX_URL_LENGTH = 2048

# Path segments used by the HTTP routes; an identifier cannot shadow them.
RESERVED_IDENTIFIERS = frozenset({
    "api", "index", "health", "docs", "redoc", "static", "favicon.ico", "robots.txt",
})

IDENTIFIER_PATTERN = re.compile(r"^[a-zA-Z0-9_-]+$")


def is_valid_url(url: str) -> Tuple[bool, str]:
    """Validate a target URL.

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not url or not isinstance(url, str):
        return False, "URL is required"

    if len(url) > MAX_URL_LENGTH:
        return False, f"URL is too long (max {MAX_URL_LENGTH} characters)"

    try:
        result = urlparse(url)
    except ValueError as e:
        return False, f"Invalid URL format: {e}"

    if result.scheme not in ("http", "https"):
        return False, "URL must use http or https protocol"

    if not result.netloc:
        return False, "URL must have a valid domain"

    return True, ""


def is_valid_identifier(identifier: str, min_length: int = 4, max_length: int = 20) -> Tuple[bool, str]:
    """Validate a caller-supplied identifier.

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not identifier or not isinstance(identifier, str):
        return False, "Identifier is required"

    if len(identifier) < min_length:
        return False, f"Identifier must be at least {min_length} characters"

    if len(identifier) > max_length:
        return False, f"Identifier must be at most {max_length} characters"

    if not IDENTIFIER_PATTERN.match(identifier):
        return False, "Identifier can only contain letters, numbers, hyphens, and underscores"

    if identifier.lower() in RESERVED_IDENTIFIERS:
        return False, f"'{identifier}' is a reserved word and cannot be used"

    return True, ""
