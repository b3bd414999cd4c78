"""
Recipient sync pipeline - core business logic.

This module keeps the composer's recipient list in sync with the sending
preferences of each address:
1. Fetch send preferences for all recipients (failures are omitted)
2. Offer remediation for invalid signatures / unpinned primary keys
3. Drop recipients that failed to fetch or remain broken
4. Enrich the remaining recipients with PGP info and validity
5. Update the per-message cache and return the addresses to drop

Recoverable problems are reported as data in the SyncResult. Unexpected
collaborator errors propagate and leave the cache untouched.

Usage:
    from integrations import send_preferences
    from services.confirmation import AutoPinPrimaryKeys
    from services.key_cache import KeyCache
    from services.typo import check_typo

    factory = RecipientSyncFactory(
        send_preferences=send_preferences,
        auto_pin=AutoPinPrimaryKeys(),
        check_typo=check_typo,
        key_cache=KeyCache(send_preferences.get_public_keys)
    )
    model = factory.for_message(message)
    result = await model.sync(recipients)
"""

import asyncio
import logging
import time
from typing import Any, Callable, List, Optional, Sequence

from .address_validator import AddressValidator
from .enrichment import EnrichmentPipeline, Extender
from .models import RecipientRecord, SyncResult
from .policy_resolver import PolicyResolver
from .recipient_cache import RecipientCache
from services.pgp import extend_pgp

logger = logging.getLogger(__name__)


class RecipientSyncModel:
    """
    Sync model for the recipients of one composed message.

    Owns the message's RecipientCache. Overlapping sync() calls are
    serialized so cache updates never interleave.
    """

    def __init__(
        self,
        message: Any,
        send_preferences,
        policy_resolver: PolicyResolver,
        enrichment: EnrichmentPipeline,
        cache: Optional[RecipientCache] = None
    ):
        """
        Args:
            message: Message being composed, passed through to the preference service
            send_preferences: Object with async get(addresses, context, suppress_errors)
            policy_resolver: Resolver for signature / pinning issues
            enrichment: Pipeline attaching PGP info and validity
            cache: Cache to own (a fresh one by default)
        """
        self.message = message
        self._send_preferences = send_preferences
        self._policy_resolver = policy_resolver
        self._enrichment = enrichment
        self._cache = cache if cache is not None else RecipientCache()
        # Created on first sync so it binds to the running loop
        self._lock: Optional[asyncio.Lock] = None

    @property
    def cache(self) -> RecipientCache:
        return self._cache

    def extend_from_cache(self, records: Optional[Sequence[RecipientRecord]] = None) -> List[RecipientRecord]:
        """Extend recipients with cached information (see RecipientCache.lookup)."""
        return self._cache.lookup(records)

    async def sync(self, emails: Optional[Sequence[RecipientRecord]] = None) -> SyncResult:
        """
        Sync a list of recipients to the cache.

        Args:
            emails: Recipients currently in the composer

        Returns:
            SyncResult with the addresses to remove and those that failed to fetch
        """
        if self._lock is None:
            self._lock = asyncio.Lock()
        async with self._lock:
            return await self._sync(list(emails or []))

    async def _sync(self, emails: List[RecipientRecord]) -> SyncResult:
        start_time = time.time()
        addresses = [email.address for email in emails]
        logger.info(f"Syncing {len(addresses)} recipient(s)")

        # Errors for individual addresses are suppressed by the service
        preferences = await self._send_preferences.get(addresses, self.message, True)

        failed_addresses = [address for address in addresses if address not in preferences]
        if failed_addresses:
            logger.warning(f"Send preferences unavailable for: {failed_addresses}")

        invalid_addresses = await self._policy_resolver.resolve(preferences)

        addresses_to_remove = invalid_addresses + failed_addresses
        to_remove = set(addresses_to_remove)

        filtered = [email for email in emails if email.address not in to_remove]
        extended = await self._enrichment.enrich(filtered, preferences)

        self._cache.update(extended, addresses_to_remove)

        result = SyncResult(
            addresses_to_remove=addresses_to_remove,
            failed_addresses=failed_addresses
        )
        execution_time = time.time() - start_time
        logger.info(
            f"Sync complete: {result}, cached={len(self._cache)}, "
            f"execution_time={execution_time:.2f}s"
        )
        return result


class RecipientSyncFactory:
    """
    Builds a RecipientSyncModel per composed message.

    Collaborators are shared across messages; caches are not.
    """

    def __init__(
        self,
        send_preferences,
        auto_pin,
        check_typo: Callable[[str], bool],
        key_cache,
        extend: Extender = extend_pgp
    ):
        """
        Args:
            send_preferences: Preference service (async get)
            auto_pin: Remediation collaborator (async confirm / resign)
            check_typo: Typo checker
            key_cache: Key-invalidity oracle (async is_invalid)
            extend: PGP metadata extender
        """
        self._send_preferences = send_preferences
        self._policy_resolver = PolicyResolver(auto_pin)
        self._enrichment = EnrichmentPipeline(extend, AddressValidator(check_typo, key_cache))

    def for_message(self, message: Any) -> RecipientSyncModel:
        return RecipientSyncModel(
            message,
            self._send_preferences,
            self._policy_resolver,
            self._enrichment,
            RecipientCache()
        )
