"""
Email address syntax checks.
"""

import re
from email.utils import parseaddr

EMAIL_PATTERN = re.compile(
    r"^[A-Za-z0-9.!#$%&'*+/=?^_`{|}~-]+@[A-Za-z0-9-]+(?:\.[A-Za-z0-9-]+)+$"
)
MAX_EMAIL_LENGTH = 320


def is_valid_address(address: str) -> bool:
    """
    Check that an address is well-formed.

    Args:
        address: Bare email address (no display name)

    Returns:
        True if the address matches the required syntax

    Example:
        >>> is_valid_address("alice@example.com")
        True
        >>> is_valid_address("alice")
        False
    """
    if not address or not isinstance(address, str) or len(address) > MAX_EMAIL_LENGTH:
        return False
    if "\r" in address or "\n" in address:
        return False
    _, parsed = parseaddr(address)
    if parsed != address:
        return False
    return bool(EMAIL_PATTERN.fullmatch(address))
