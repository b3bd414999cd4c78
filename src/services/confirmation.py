"""
Confirmation of automatic key remediation.

When a recipient's primary key is not pinned, or the contact signature
does not verify, the user (or a configured policy) may allow the keys to
be pinned / the contact re-signed automatically. This module asks that
question and reports whether the issue was resolved.

Without an interactive prompt the answer comes from configuration:
    AUTO_PIN_PRIMARY_KEYS=true   pin missing primary keys automatically
    AUTO_RESIGN_CONTACTS=true    re-sign contacts with invalid signatures
"""

import logging
import os
from typing import Awaitable, Callable, List, Optional, Sequence

logger = logging.getLogger(__name__)

# Async callable: (addresses) -> True if the user accepted
Prompt = Callable[[List[str]], Awaitable[bool]]


def _env_flag(name: str) -> bool:
    return os.environ.get(name, 'false').strip().lower() in ('1', 'true', 'yes')


AUTO_PIN_PRIMARY_KEYS = _env_flag('AUTO_PIN_PRIMARY_KEYS')
AUTO_RESIGN_CONTACTS = _env_flag('AUTO_RESIGN_CONTACTS')


class AutoPinPrimaryKeys:
    """
    Offers automatic pinning and re-signing for problematic recipients.

    Both operations return True only if the issue is resolved for every
    listed address. Prompt failures are logged and count as declined.
    """

    def __init__(
        self,
        pin_prompt: Optional[Prompt] = None,
        resign_prompt: Optional[Prompt] = None,
        auto_pin: Optional[bool] = None,
        auto_resign: Optional[bool] = None
    ):
        self._pin_prompt = pin_prompt
        self._resign_prompt = resign_prompt
        self._auto_pin = AUTO_PIN_PRIMARY_KEYS if auto_pin is None else auto_pin
        self._auto_resign = AUTO_RESIGN_CONTACTS if auto_resign is None else auto_resign

    async def confirm(self, addresses: Sequence[str]) -> bool:
        """
        Ask to pin the primary keys of the given addresses.

        Args:
            addresses: Addresses whose primary key is not pinned

        Returns:
            True if the keys were pinned for all addresses
        """
        return await self._ask('pin', addresses, self._pin_prompt, self._auto_pin)

    async def resign(self, addresses: Sequence[str]) -> bool:
        """
        Ask to re-sign the contacts of the given addresses.

        Args:
            addresses: Addresses whose contact signature failed to verify

        Returns:
            True if all contacts were re-signed
        """
        return await self._ask('resign', addresses, self._resign_prompt, self._auto_resign)

    async def _ask(
        self,
        action: str,
        addresses: Sequence[str],
        prompt: Optional[Prompt],
        default: bool
    ) -> bool:
        addresses = list(addresses)
        if not addresses:
            return True

        if prompt is None:
            logger.info(f"Auto-{action} for {len(addresses)} address(es): {'accepted' if default else 'declined'} by configuration")
            return default

        try:
            accepted = bool(await prompt(addresses))
        except Exception as e:
            logger.error(f"Auto-{action} prompt failed for {addresses}: {e}", exc_info=True)
            return False

        if not accepted:
            logger.warning(f"Auto-{action} declined for {len(addresses)} address(es)")
        return accepted
