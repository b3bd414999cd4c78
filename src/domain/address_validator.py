"""
Recipient address validation.
"""

import logging
from typing import Callable

from services.address import is_valid_address

logger = logging.getLogger(__name__)


class AddressValidator:
    """
    Decides whether a recipient address is invalid.

    Checks run in order and stop at the first failure:
    1. Syntax (no collaborator involved)
    2. Typo checker
    3. Key-invalidity oracle (async lookup)
    """

    def __init__(self, check_typo: Callable[[str], bool], key_cache):
        """
        Args:
            check_typo: Returns True if the address looks like a typo
            key_cache: Object with async is_invalid(address) -> bool
        """
        self._check_typo = check_typo
        self._key_cache = key_cache

    async def is_invalid(self, address: str) -> bool:
        if not is_valid_address(address):
            logger.info(f"Malformed address: {address!r}")
            return True
        if self._check_typo(address):
            return True
        return bool(await self._key_cache.is_invalid(address))
