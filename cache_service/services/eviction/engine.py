"""Eviction engine: the single owner and mutator of cache state.

The engine serializes every mutation (admit, hit bookkeeping, flush and
policy switch) behind one lock, so a reader sees either the old policy and
store or the new ones, never a mix.
"""

from __future__ import annotations

import random
import threading
import time
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, List, Optional

from cache_service.core.errors import CapacityInvariantViolation
from cache_service.core.logging import get_logger
from cache_service.services.eviction.entry_store import CacheEntry, EntryStore
from cache_service.services.eviction.policies import (
    EvictionPolicy,
    QualityScorePolicy,
    create_policy,
)
from cache_service.services.eviction.policy_config import (
    PolicyConfig,
    PolicyKind,
    validate_similarity,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class EvictionNotice:
    """A key removed from the cache and why."""

    key: str
    reason: str = "capacity"


@dataclass(frozen=True)
class LookupResult:
    """Outcome of a lookup: hit with a value, or miss."""

    key: str
    hit: bool
    value: Any = None

    @classmethod
    def miss(cls, key: str) -> "LookupResult":
        return cls(key=key, hit=False)


@dataclass(frozen=True)
class AdmitResult:
    key: str
    refreshed: bool
    evicted: List[EvictionNotice] = field(default_factory=list)

    @property
    def evicted_keys(self) -> List[str]:
        return [notice.key for notice in self.evicted]


@dataclass(frozen=True)
class SwitchResult:
    policy: str
    maxsize: int
    clean_size: int
    previous_policy: str
    cache_reset: bool = True

    @property
    def message(self) -> str:
        return (
            f"Switched eviction policy from {self.previous_policy} to {self.policy} "
            f"(maxsize={self.maxsize}, clean_size={self.clean_size}); cache reset"
        )


@dataclass
class CacheStats:
    """Hit/miss/eviction counters since the last reset."""

    hits: int = 0
    misses: int = 0
    evictions: int = 0

    @property
    def total_requests(self) -> int:
        """Total number of lookups."""
        return self.hits + self.misses

    @property
    def hit_rate(self) -> float:
        """Calculate cache hit rate."""
        if self.total_requests == 0:
            return 0.0
        return self.hits / self.total_requests

    def record_hit(self) -> None:
        self.hits += 1

    def record_miss(self) -> None:
        self.misses += 1

    def reset(self) -> None:
        self.hits = 0
        self.misses = 0
        self.evictions = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
            "total_requests": self.total_requests,
            "hit_rate": self.hit_rate,
        }


@dataclass(frozen=True)
class EngineSnapshot:
    """Point-in-time copy of engine state for read-only reporting."""

    config: PolicyConfig
    policy_info: Dict[str, Any]
    entries: List[CacheEntry]
    total_accesses: int
    stats: Dict[str, Any]
    taken_at: float
    generation: int = 0
    generation_seq: int = 0
    ranks: Optional[Dict[str, float]] = None


EvictionListener = Callable[[EvictionNotice], None]


class EvictionEngine:
    """Cache front door: admission, lookups, capacity enforcement, hot swap.

    Args:
        config: Validated initial policy configuration.
        clock: Returns the current time; injectable for tests and benchmarks.
        rng: Random source handed to Random Replacement policies.
    """

    def __init__(
        self,
        config: PolicyConfig,
        clock: Callable[[], float] = time.monotonic,
        rng: Optional[random.Random] = None,
    ):
        self._check_capacity_config(config)
        self._clock = clock
        self._rng = rng or random.Random()
        self._lock = threading.RLock()
        self._config = config
        self._policy: EvictionPolicy = create_policy(config, rng=self._rng)
        self._store = EntryStore()
        self._total_accesses = 0
        self._seq = 0
        # Bumped by every switch; entries of the current generation all have
        # insertion_seq > _generation_seq
        self._generation = 0
        self._generation_seq = 0
        self._stats = CacheStats()
        self._listeners: List[EvictionListener] = []

    # ------------------------------------------------------------------
    # Read-only accessors
    # ------------------------------------------------------------------

    @property
    def config(self) -> PolicyConfig:
        return self._config

    @property
    def policy(self) -> EvictionPolicy:
        return self._policy

    @property
    def policy_kind(self) -> PolicyKind:
        return self._config.kind

    @property
    def total_accesses(self) -> int:
        return self._total_accesses

    @property
    def stats(self) -> CacheStats:
        return self._stats

    def size(self) -> int:
        with self._lock:
            return self._store.size()

    def keys(self) -> List[str]:
        with self._lock:
            return self._store.keys()

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._store

    def add_eviction_listener(self, listener: EvictionListener) -> None:
        """Register a callback invoked once per evicted key."""
        self._listeners.append(listener)

    # ------------------------------------------------------------------
    # Data plane
    # ------------------------------------------------------------------

    def lookup(self, key: str, similarity_score: Optional[float] = None) -> LookupResult:
        """Look a key up; a hit updates its policy bookkeeping.

        A miss leaves the store untouched. It only bumps the miss counter in
        `stats`, which feeds metrics and nothing else.

        Args:
            key: Cache key.
            similarity_score: Similarity of the query that produced this hit,
                fed to the Quality Score moving average when given.
        """
        if similarity_score is not None:
            similarity_score = validate_similarity(similarity_score)

        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                self._stats.record_miss()
                return LookupResult.miss(key)

            self._policy.on_hit(entry, self._clock(), similarity_score, seq=self._next_seq())
            self._total_accesses += 1
            self._stats.record_hit()
            return LookupResult(key=key, hit=True, value=entry.value)

    def admit(self, key: str, value: Any, similarity_score: float = 1.0) -> AdmitResult:
        """Cache a value, evicting per the active policy if over capacity.

        Re-admitting a cached key overwrites its value and counts as a hit.
        """
        similarity_score = validate_similarity(similarity_score)

        with self._lock:
            now = self._clock()
            existing = self._store.get(key)
            if existing is not None:
                existing.value = value
                self._policy.on_hit(existing, now, similarity_score, seq=self._next_seq())
                refreshed = True
            else:
                entry = self._policy.on_admit(key, value, similarity_score, now, seq=self._next_seq())
                self._store.put(key, entry)
                refreshed = False

            evicted = self._enforce_capacity()

        self._notify(evicted)
        return AdmitResult(key=key, refreshed=refreshed, evicted=evicted)

    def flush(self) -> None:
        """Drop every entry; the active policy stays."""
        with self._lock:
            dropped = self._store.size()
            self._store.clear()
            self._total_accesses = 0
            self._stats.reset()
        logger.info("Cache flushed", extra={"dropped_entries": dropped, "policy": self._config.kind.value})

    # ------------------------------------------------------------------
    # Control plane
    # ------------------------------------------------------------------

    def switch_policy(self, new_config: PolicyConfig) -> SwitchResult:
        """Replace the active policy and reset the store.

        The config is validated before anything changes; on failure the
        previous policy and entries are untouched.

        Raises:
            ConfigurationError: If `new_config` is invalid.
        """
        new_config.validate()
        new_policy = create_policy(new_config, rng=self._rng)

        with self._lock:
            previous = self._config.kind.value
            dropped = self._store.size()
            self._config = new_config
            self._policy = new_policy
            self._store.clear()
            self._total_accesses = 0
            self._stats.reset()
            self._generation += 1
            self._generation_seq = self._seq

        logger.info(
            "Eviction policy switched",
            extra={
                "previous_policy": previous,
                "policy": new_config.kind.value,
                "maxsize": new_config.maxsize,
                "clean_size": new_config.clean_size,
                "dropped_entries": dropped,
            },
        )
        return SwitchResult(
            policy=new_config.kind.value,
            maxsize=new_config.maxsize,
            clean_size=new_config.clean_size,
            previous_policy=previous,
        )

    def snapshot(self) -> EngineSnapshot:
        """Copy state under the lock for consistent reporting."""
        with self._lock:
            now = self._clock()
            ranks = None
            if isinstance(self._policy, QualityScorePolicy):
                ranks = self._policy.composite_ranks(self._store, now)
            entries = [replace(entry) for entry in self._store.entries()]
            return EngineSnapshot(
                config=self._config,
                policy_info=self._policy.describe(),
                entries=entries,
                total_accesses=self._total_accesses,
                stats=self._stats.to_dict(),
                taken_at=now,
                generation=self._generation,
                generation_seq=self._generation_seq,
                ranks=ranks,
            )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _next_seq(self) -> int:
        self._seq += 1
        return self._seq

    def _enforce_capacity(self) -> List[EvictionNotice]:
        """Evict `clean_size` keys per overflow until within maxsize. Lock held."""
        evicted: List[EvictionNotice] = []
        maxsize = self._config.maxsize
        clean_size = self._config.clean_size

        while self._store.size() > maxsize:
            count = min(clean_size, self._store.size())
            candidates = self._policy.select_eviction_candidates(self._store, count)
            if not candidates:
                raise CapacityInvariantViolation(
                    "Policy returned no eviction candidates while over capacity",
                    details={"policy": self._config.kind.value, "size": self._store.size(), "maxsize": maxsize},
                )
            for key in candidates:
                self._store.remove(key)
                evicted.append(EvictionNotice(key=key))
                self._stats.evictions += 1
                logger.debug("Evicted cache entry", extra={"key": key, "policy": self._config.kind.value})

        return evicted

    def _notify(self, evicted: List[EvictionNotice]) -> None:
        for notice in evicted:
            for listener in self._listeners:
                try:
                    listener(notice)
                except Exception as e:
                    logger.error(f"Eviction listener failed for key {notice.key!r}: {e}", exc_info=True)

    @staticmethod
    def _check_capacity_config(config: PolicyConfig) -> None:
        if config.maxsize <= 0 or not 0 < config.clean_size <= config.maxsize:
            raise CapacityInvariantViolation(
                "Engine constructed with an unvalidated capacity configuration",
                details={"maxsize": config.maxsize, "clean_size": config.clean_size},
            )
