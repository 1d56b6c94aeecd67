"""Syntactic checks applied before anything touches storage."""

import re
from typing import Any

ALIAS_MIN_LENGTH = 3
ALIAS_MAX_LENGTH = 16

AliasPattern = re.compile(r"^[A-Za-z0-9_-]{%d,%d}$" % (ALIAS_MIN_LENGTH, ALIAS_MAX_LENGTH))
LongUrlPattern = re.compile(r"^https?://")

# Single-segment paths the app serves itself. A code equal to one of these
# would be shadowed by that route and could never redirect.
RESERVED_CODES = frozenset({"health", "docs", "redoc", "stats", "shorten"})


def validate_alias(alias: Any) -> bool:
    """
    True if `alias` is usable as a custom short code.

    Rules:
        - 3 to 16 characters
        - only letters, digits, "_" and "-"

    Only user-supplied aliases go through here; generated codes are drawn
    from a subset of the same character class.
    """
    # fullmatch rejects a trailing newline that "$" would let through
    return isinstance(alias, str) and AliasPattern.fullmatch(alias) is not None


def is_valid_long_url(url: Any) -> bool:
    """True if `url` is a non-empty string starting with http:// or https://."""
    return isinstance(url, str) and bool(url) and LongUrlPattern.match(url) is not None


def is_reserved_code(code: str) -> bool:
    """True if `code` collides with one of the app's own routes."""
    return code in RESERVED_CODES
