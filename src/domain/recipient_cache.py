"""
Per-message cache of enriched recipients.
"""

import logging
from dataclasses import replace
from typing import Dict, Iterable, List, Optional

from .models import RecipientRecord

logger = logging.getLogger(__name__)


class RecipientCache:
    """
    Maps address -> last enriched RecipientRecord for one composed message.

    Only the sync model writes to the cache, through update().
    """

    def __init__(self):
        self._entries: Dict[str, RecipientRecord] = {}

    def lookup(self, records: Optional[Iterable[RecipientRecord]] = None) -> List[RecipientRecord]:
        """
        Extend recipients with their cached information.

        Unknown addresses come back with load_crypt_info=True. Known ones come
        back as the cached record overridden by the fields set on the input.
        """
        result = []
        for record in records or []:
            cached = self._entries.get(record.address)
            if cached is None:
                result.append(replace(record, load_crypt_info=True))
            else:
                result.append(record.merged_over(cached))
        return result

    def update(
        self,
        to_add: Optional[Iterable[RecipientRecord]] = None,
        to_remove: Optional[Iterable[str]] = None
    ) -> None:
        """
        Upsert enriched records, then drop the given addresses.

        Args:
            to_add: Enriched records (last write wins per address)
            to_remove: Addresses to evict (missing ones are ignored)
        """
        added = 0
        for record in to_add or []:
            self._entries[record.address] = record
            added += 1

        removed = 0
        for address in to_remove or []:
            if self._entries.pop(address, None) is not None:
                removed += 1

        logger.debug(f"Cache updated: added={added}, removed={removed}, size={len(self._entries)}")

    def get(self, address: str) -> Optional[RecipientRecord]:
        return self._entries.get(address)

    def snapshot(self) -> Dict[str, RecipientRecord]:
        """Shallow copy of the current entries."""
        return dict(self._entries)

    def __contains__(self, address: str) -> bool:
        return address in self._entries

    def __len__(self) -> int:
        return len(self._entries)
