"""
Security policy checks on sending preferences.

Finds recipients whose contact signature does not verify or whose primary
key is not pinned, and offers automatic remediation before reporting them
as broken.
"""

import logging
from typing import List

from .models import PreferenceMap

logger = logging.getLogger(__name__)


class PolicyResolver:
    """
    Resolves signature and key-pinning policy violations.

    The remediation collaborator must provide:
        async resign(addresses) -> bool
        async confirm(addresses) -> bool
    """

    def __init__(self, auto_pin):
        self._auto_pin = auto_pin

    async def resolve(self, preferences: PreferenceMap) -> List[str]:
        """
        Return the addresses that remain broken after remediation.

        Signature issues come first, then pinning issues. An address failing
        both checks appears twice; callers only test membership.

        Args:
            preferences: Address -> PreferenceRecord for fetched addresses

        Returns:
            List of broken addresses (possibly empty)
        """
        invalid_signatures = await self._handle_invalid_signatures(preferences)
        missing_primary_keys = await self._handle_missing_primary_keys(preferences)
        return invalid_signatures + missing_primary_keys

    async def _handle_invalid_signatures(self, preferences: PreferenceMap) -> List[str]:
        invalid = [address for address, prefs in preferences.items() if not prefs.is_verified]
        if not invalid:
            return []

        logger.info(f"Contact signature not verified for {len(invalid)} address(es)")
        if await self._auto_pin.resign(invalid):
            # fixed automatically
            return []
        return invalid

    async def _handle_missing_primary_keys(self, preferences: PreferenceMap) -> List[str]:
        missing = [address for address, prefs in preferences.items() if not prefs.primary_pinned]
        if not missing:
            return []

        logger.info(f"Primary key not pinned for {len(missing)} address(es)")
        if await self._auto_pin.confirm(missing):
            # fixed automatically
            return []
        return missing
