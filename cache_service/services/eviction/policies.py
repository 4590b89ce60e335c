"""Eviction policies for the response cache.

Every policy implements the same four operations:

- on_admit: build the entry for a newly cached key
- on_hit: update an entry when it is read or re-admitted
- select_eviction_candidates: pick which keys to drop on overflow
- describe: metadata for status and catalog endpoints

Policies hold no entries themselves; they rank whatever EntryStore the
engine hands them.
"""

import heapq
import random
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

from cache_service.services.eviction.entry_store import CacheEntry, EntryStore
from cache_service.services.eviction.policy_config import PolicyConfig, PolicyKind


class EvictionPolicy(ABC):
    """Abstract base class for cache eviction policies."""

    kind: PolicyKind
    description: str = ""

    def __init__(self, config: PolicyConfig):
        self.config = config

    @property
    def name(self) -> str:
        return self.kind.value

    @property
    def family(self) -> str:
        return self.kind.family

    def on_admit(
        self,
        key: str,
        value: Any,
        similarity_score: float,
        now: float,
        seq: int = 0,
    ) -> CacheEntry:
        """Create the entry for a newly admitted key."""
        return CacheEntry(
            key=key,
            value=value,
            created_at=now,
            last_accessed_at=now,
            similarity_score=similarity_score,
            quality_score=similarity_score,
            insertion_seq=seq,
            last_access_seq=seq,
        )

    def on_hit(
        self,
        entry: CacheEntry,
        now: float,
        similarity_score: Optional[float] = None,
        seq: int = 0,
    ) -> None:
        """Record an access on an existing entry."""
        entry.record_access(now, seq)

    @abstractmethod
    def select_eviction_candidates(self, store: EntryStore, clean_size: int) -> List[str]:
        """Return up to `clean_size` keys to evict, first-to-go first."""
        ...

    def describe(self) -> Dict[str, Any]:
        """Policy metadata for status reporting."""
        return {
            "name": self.name,
            "type": self.family,
            "description": self.description,
            "maxsize": self.config.maxsize,
            "clean_size": self.config.clean_size,
        }

    @staticmethod
    def _lowest(store: EntryStore, count: int, rank) -> List[str]:
        """Keys of the `count` entries with the smallest rank tuple."""
        if count <= 0:
            return []
        chosen = heapq.nsmallest(count, store.entries(), key=rank)
        return [entry.key for entry in chosen]


class LRUPolicy(EvictionPolicy):
    """Least Recently Used eviction policy."""

    kind = PolicyKind.LRU
    description = "Evicts the entries that have gone longest without being accessed."

    def select_eviction_candidates(self, store: EntryStore, clean_size: int) -> List[str]:
        # last_access_seq strictly increases with every admit and hit
        return self._lowest(store, clean_size, lambda e: e.last_access_seq)


class LFUPolicy(EvictionPolicy):
    """Least Frequently Used eviction policy."""

    kind = PolicyKind.LFU
    description = "Evicts the entries with the fewest accesses; ties go to the oldest insert."

    def select_eviction_candidates(self, store: EntryStore, clean_size: int) -> List[str]:
        return self._lowest(store, clean_size, lambda e: (e.access_count, e.insertion_seq))


class FIFOPolicy(EvictionPolicy):
    """First In First Out eviction policy."""

    kind = PolicyKind.FIFO
    description = "Evicts the oldest inserted entries regardless of how often they are read."

    def select_eviction_candidates(self, store: EntryStore, clean_size: int) -> List[str]:
        # Store iteration order is insertion order
        return store.keys()[:max(clean_size, 0)]


class RandomReplacementPolicy(EvictionPolicy):
    """Random Replacement eviction policy.

    The random source is injected so a seeded generator gives reproducible
    evictions.
    """

    kind = PolicyKind.RR
    description = "Evicts entries chosen uniformly at random."

    def __init__(self, config: PolicyConfig, rng: Optional[random.Random] = None):
        super().__init__(config)
        self.rng = rng or random.Random()

    def select_eviction_candidates(self, store: EntryStore, clean_size: int) -> List[str]:
        keys = store.keys()
        return self.rng.sample(keys, min(max(clean_size, 0), len(keys)))


class QualityScorePolicy(EvictionPolicy):
    """Composite policy ranking entries on answer quality, recency and frequency.

    Quality starts at the similarity score the answer was admitted with and
    follows an exponential moving average of the similarity of later hits:

        quality <- quality + learning_rate * (similarity - quality)

    The eviction rank blends it with recency and frequency, both
    min/max-normalized over the current store:

        rank = wq * quality + wr * recency + wf * frequency

    Lowest rank is evicted first.
    """

    kind = PolicyKind.QUALITY_SCORE
    description = (
        "Blends similarity-derived answer quality with recency and access "
        "frequency; evicts the lowest composite score."
    )

    def __init__(self, config: PolicyConfig):
        super().__init__(config)
        self.params = config.quality

    def on_hit(
        self,
        entry: CacheEntry,
        now: float,
        similarity_score: Optional[float] = None,
        seq: int = 0,
    ) -> None:
        super().on_hit(entry, now, similarity_score, seq)
        if similarity_score is not None:
            entry.quality_score += self.params.learning_rate * (similarity_score - entry.quality_score)

    def composite_ranks(self, store: EntryStore, now: Optional[float] = None) -> Dict[str, float]:
        """Composite rank per key, each in [0, 1]."""
        entries = store.entries()
        if not entries:
            return {}
        if now is None:
            now = max(e.last_accessed_at for e in entries)

        ages = [now - e.last_accessed_at for e in entries]
        counts = [e.access_count for e in entries]
        min_age, max_age = min(ages), max(ages)
        min_count, max_count = min(counts), max(counts)

        ranks = {}
        for entry, age, count in zip(entries, ages, counts):
            recency = 1.0 - _normalize(age, min_age, max_age, degenerate=0.0)
            frequency = _normalize(count, min_count, max_count, degenerate=1.0)
            ranks[entry.key] = (
                self.params.quality_weight * entry.quality_score
                + self.params.recency_weight * recency
                + self.params.frequency_weight * frequency
            )
        return ranks

    def select_eviction_candidates(self, store: EntryStore, clean_size: int) -> List[str]:
        ranks = self.composite_ranks(store)
        return self._lowest(store, clean_size, lambda e: (ranks[e.key], e.insertion_seq))

    def describe(self) -> Dict[str, Any]:
        info = super().describe()
        info["learning_rate"] = self.params.learning_rate
        info["weights"] = self.params.weights()
        return info


def _normalize(value: float, low: float, high: float, degenerate: float) -> float:
    """Scale value into [0, 1]; `degenerate` is returned when high == low."""
    span = high - low
    if span <= 0:
        return degenerate
    return (value - low) / span


_POLICY_CLASSES = {
    PolicyKind.LRU: LRUPolicy,
    PolicyKind.LFU: LFUPolicy,
    PolicyKind.FIFO: FIFOPolicy,
    PolicyKind.RR: RandomReplacementPolicy,
    PolicyKind.QUALITY_SCORE: QualityScorePolicy,
}


def create_policy(config: PolicyConfig, rng: Optional[random.Random] = None) -> EvictionPolicy:
    """Instantiate the policy a validated config describes."""
    if config.kind is PolicyKind.RR:
        return RandomReplacementPolicy(config, rng=rng)
    return _POLICY_CLASSES[config.kind](config)


def policy_classes() -> Tuple[type, ...]:
    return tuple(_POLICY_CLASSES.values())
