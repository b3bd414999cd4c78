"""
Public key lookups with an in-memory TTL cache.

Answers whether an address is known to be unusable as a recipient
(non-existent or disabled) based on the key server's response code.
Results are cached per address for KEY_CACHE_TTL seconds.
"""

import asyncio
import logging
import os
import time
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple

logger = logging.getLogger(__name__)

# Cache TTL in seconds (default: 5 minutes)
CACHE_TTL_SECONDS = int(os.environ.get('KEY_CACHE_TTL', '300'))

# Response codes meaning the address cannot receive mail
INVALID_ADDRESS_CODES = frozenset({33102, 33103, 2028})

KeyFetcher = Callable[[str], Awaitable[Dict[str, Any]]]


class KeyCache:
    """
    Caches public key lookups per address.

    Concurrent lookups for the same address share one in-flight fetch.
    """

    def __init__(self, fetch_keys: KeyFetcher, ttl_seconds: Optional[int] = None):
        """
        Args:
            fetch_keys: Coroutine function returning {"Code": int, "Keys": [...]}
            ttl_seconds: Cache TTL, defaults to KEY_CACHE_TTL
        """
        self._fetch_keys = fetch_keys
        self._ttl = CACHE_TTL_SECONDS if ttl_seconds is None else ttl_seconds
        # {address: (response, timestamp)}
        self._cache: Dict[str, Tuple[Dict[str, Any], float]] = {}
        self._pending: Dict[str, asyncio.Future] = {}

    async def get(self, address: str) -> Dict[str, Any]:
        """
        Get the key lookup response for an address, from cache if fresh.

        Raises:
            Whatever the fetcher raises (failures are not cached)
        """
        cached = self._cache.get(address)
        if cached:
            response, timestamp = cached
            if time.time() - timestamp < self._ttl:
                return response
            del self._cache[address]

        pending = self._pending.get(address)
        while pending is not None:
            try:
                # Shielded so a cancelled waiter doesn't cancel the shared fetch
                return await asyncio.shield(pending)
            except asyncio.CancelledError:
                if not pending.cancelled():
                    raise
            # The owning lookup was cancelled: take over
            pending = self._pending.get(address)

        future = asyncio.get_running_loop().create_future()
        self._pending[address] = future
        try:
            response = await self._fetch_keys(address)
        except Exception as e:
            future.set_exception(e)
            # Mark retrieved so an unawaited future doesn't log a warning
            future.exception()
            raise
        else:
            self._cache[address] = (response, time.time())
            future.set_result(response)
            return response
        finally:
            if not future.done():
                # Owner cancelled before the fetch settled
                future.cancel()
            del self._pending[address]

    async def is_invalid(self, address: str) -> bool:
        """
        Check whether the key server reported the address as unusable.

        Lookup failures are logged and treated as valid; the preference
        fetch is responsible for reporting unreachable addresses.
        """
        try:
            response = await self.get(address)
        except Exception as e:
            logger.warning(f"Key lookup failed for {address}: {e}")
            return False

        return response.get('Code') in INVALID_ADDRESS_CODES

    def clear(self, address: Optional[str] = None) -> None:
        """Drop one cached address, or everything."""
        if address is None:
            self._cache.clear()
        else:
            self._cache.pop(address, None)
