"""
Cache store abstraction.

The engine needs three operations from a store and nothing else: it does
not assume any eviction, indexing or persistence strategy. Implementations
range from a process-local dictionary to a SQLite file.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Optional, Protocol

from cachekeeper.cache.models import CacheRecord


class CacheStore(Protocol):
    """
    Protocol for pluggable cache stores.

    Every operation may suspend and may fail with ``StoreError``. No
    atomicity is promised across calls: two concurrent misses for the same
    key may both ``put``, and the last write wins.
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[CacheRecord]:
        """
        Look up a record.

        Args:
            key: Cache key

        Returns:
            The stored record, or None if absent

        Raises:
            StoreError: If the lookup fails
        """
        ...

    @abstractmethod
    async def put(self, key: str, record: CacheRecord) -> None:
        """
        Store a record, replacing any existing record for the key.

        Args:
            key: Cache key
            record: Record to store

        Raises:
            StoreError: If the write fails; the record is then not stored
        """
        ...

    @abstractmethod
    async def delete(self, key: str) -> Optional[CacheRecord]:
        """
        Remove a record.

        Args:
            key: Cache key

        Returns:
            The removed record, or None if nothing was stored

        Raises:
            StoreError: If the removal fails
        """
        ...
