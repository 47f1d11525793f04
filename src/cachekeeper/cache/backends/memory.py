"""In-memory cache store for tests and single-process deployments."""

from __future__ import annotations

import logging
from typing import Dict, Optional

from cachekeeper.cache.models import CacheRecord
from cachekeeper.cache.store import CacheStore

logger = logging.getLogger(__name__)


class MemoryCacheStore(CacheStore):
    """Dictionary-backed cache store.

    Records are immutable, so they are stored and returned as-is. Nothing is
    ever evicted on its own; expired records stay until a keep decision
    evicts or replaces them.
    """

    def __init__(self) -> None:
        self._records: Dict[str, CacheRecord] = {}

    async def get(self, key: str) -> Optional[CacheRecord]:
        return self._records.get(key)

    async def put(self, key: str, record: CacheRecord) -> None:
        logger.debug("Storing cache record for key: %s", key)
        self._records[key] = record

    async def delete(self, key: str) -> Optional[CacheRecord]:
        logger.debug("Deleting cache record for key: %s", key)
        return self._records.pop(key, None)

    def clear(self) -> None:
        """Remove every record."""
        self._records.clear()

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, key: object) -> bool:
        return key in self._records
