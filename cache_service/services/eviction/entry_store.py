"""Keyed, insertion-ordered storage for cache entries."""

from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional

from cache_service.core.errors import KeyNotFoundError


@dataclass
class CacheEntry:
    """A cached value plus the bookkeeping the eviction policies rank on."""

    key: str
    value: Any
    created_at: float
    last_accessed_at: float
    similarity_score: float
    quality_score: float
    access_count: int = 1
    # Logical clocks break timestamp ties deterministically
    insertion_seq: int = 0
    last_access_seq: int = 0

    def record_access(self, now: float, seq: int) -> None:
        """Mark the entry as accessed at `now`."""
        self.last_accessed_at = now
        self.last_access_seq = seq
        self.access_count += 1


class EntryStore:
    """Mapping from key to CacheEntry preserving insertion order.

    Pure container: it never decides what to evict. The eviction engine is
    its only mutator.
    """

    def __init__(self):
        self._entries: Dict[str, CacheEntry] = {}

    def get(self, key: str) -> Optional[CacheEntry]:
        return self._entries.get(key)

    def put(self, key: str, entry: CacheEntry) -> None:
        """Insert or replace an entry.

        Replacing keeps the key's original insertion position.
        """
        self._entries[key] = entry

    def remove(self, key: str) -> CacheEntry:
        """Remove and return an entry.

        Raises:
            KeyNotFoundError: If the key is not stored.
        """
        try:
            return self._entries.pop(key)
        except KeyError:
            raise KeyNotFoundError(key) from None

    def keys(self) -> List[str]:
        """Keys in insertion order."""
        return list(self._entries.keys())

    def entries(self) -> List[CacheEntry]:
        """Entries in insertion order."""
        return list(self._entries.values())

    def size(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())
