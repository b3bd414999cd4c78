"""
Concurrent enrichment of recipients with PGP and validity information.
"""

import asyncio
import logging
from dataclasses import replace
from typing import Callable, List, Optional, Sequence

from .address_validator import AddressValidator
from .models import PreferenceMap, PreferenceRecord, RecipientRecord

logger = logging.getLogger(__name__)

Extender = Callable[[RecipientRecord, Optional[PreferenceRecord]], RecipientRecord]


class EnrichmentPipeline:
    """
    Extends each recipient with PGP metadata and an `invalid` flag.

    All recipients are processed concurrently. The first failure aborts the
    whole batch and propagates to the caller.
    """

    def __init__(self, extend: Extender, validator: AddressValidator):
        self._extend = extend
        self._validator = validator

    async def enrich(
        self,
        records: Sequence[RecipientRecord],
        preferences: PreferenceMap
    ) -> List[RecipientRecord]:
        """
        Args:
            records: Recipients to enrich (input order is preserved)
            preferences: Address -> PreferenceRecord

        Returns:
            Enriched copies of the records
        """
        logger.debug(f"Enriching {len(records)} recipient(s)")
        return list(await asyncio.gather(
            *(self._enrich_one(record, preferences.get(record.address)) for record in records)
        ))

    async def _enrich_one(
        self,
        record: RecipientRecord,
        preferences: Optional[PreferenceRecord]
    ) -> RecipientRecord:
        extended = self._extend(record, preferences)
        invalid = await self._validator.is_invalid(extended.address)
        return replace(extended, invalid=invalid)
