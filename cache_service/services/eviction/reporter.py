"""Read-only status and summary views over the eviction engine."""

import json
import statistics
from typing import Any, Dict, List

from cache_service.services.eviction.engine import EngineSnapshot, EvictionEngine
from cache_service.services.eviction.entry_store import CacheEntry
from cache_service.services.eviction.policy_config import PolicyKind

QUALITY_STATUS_FIELDS = [
    "cache_size",
    "max_size",
    "utilization_percent",
    "total_accesses",
    "policy",
    "avg_quality_score",
    "quality_range",
    "avg_access_count",
    "weights",
    "learning_rate",
]

MEMORY_STATUS_FIELDS = [
    "cache_size",
    "max_size",
    "utilization_percent",
    "policy",
    "policy_type",
    "current_size_bytes",
    "cache_keys_count",
    "access_order",
    "sample_cached_items",
]


class StatusReporter:
    """Builds status payloads from engine snapshots.

    The engine lock is only held while the snapshot is copied; all the
    formatting here runs outside it.
    """

    def __init__(self, engine: EvictionEngine, sample_size: int = 5):
        self.engine = engine
        self.sample_size = sample_size

    def status(self) -> Dict[str, Any]:
        snapshot = self.engine.snapshot()
        if snapshot.config.kind is PolicyKind.QUALITY_SCORE:
            return self._quality_status(snapshot)
        return self._memory_status(snapshot)

    def stats_summary(self) -> Dict[str, Any]:
        snapshot = self.engine.snapshot()
        kind = snapshot.config.kind
        size = len(snapshot.entries)
        maxsize = snapshot.config.maxsize
        utilization = _utilization(size, maxsize)

        return {
            "current_policy": kind.value,
            "cache_utilization": f"{size}/{maxsize} ({utilization:.1f}%)",
            "policy_type": kind.family,
            "available_stats": list(
                QUALITY_STATUS_FIELDS if kind is PolicyKind.QUALITY_SCORE else MEMORY_STATUS_FIELDS
            ),
            "key_metrics": {
                "items_cached": size,
                "utilization": utilization,
            },
            "policy_insight": self._policy_insight(snapshot),
        }

    def metrics(self) -> Dict[str, Any]:
        return self.engine.snapshot().stats

    # ------------------------------------------------------------------

    def _base(self, snapshot: EngineSnapshot) -> Dict[str, Any]:
        size = len(snapshot.entries)
        return {
            "cache_size": size,
            "max_size": snapshot.config.maxsize,
            "utilization_percent": _utilization(size, snapshot.config.maxsize),
        }

    def _quality_status(self, snapshot: EngineSnapshot) -> Dict[str, Any]:
        entries = snapshot.entries
        qualities = [e.quality_score for e in entries]
        params = snapshot.config.quality

        status = self._base(snapshot)
        status.update({
            "total_accesses": snapshot.total_accesses,
            "policy": snapshot.config.kind.value,
            "avg_quality_score": round(statistics.mean(qualities), 4) if qualities else 0.0,
            "quality_range": {
                "min": round(min(qualities), 4) if qualities else 0.0,
                "max": round(max(qualities), 4) if qualities else 0.0,
            },
            "avg_access_count": (
                round(statistics.mean(e.access_count for e in entries), 2) if entries else 0.0
            ),
            "weights": params.weights(),
            "learning_rate": params.learning_rate,
        })
        return status

    def _memory_status(self, snapshot: EngineSnapshot) -> Dict[str, Any]:
        entries = snapshot.entries
        keys = [e.key for e in entries]

        status = self._base(snapshot)
        status.update({
            "policy": snapshot.config.kind.value,
            "policy_type": "memory",
            "current_size_bytes": sum(_entry_size_bytes(e) for e in entries),
            "cache_keys_count": len(keys),
            "access_order": [e.key for e in _by_recency(entries)],
            "sample_cached_items": keys[: self.sample_size],
        })
        return status

    def _policy_insight(self, snapshot: EngineSnapshot) -> str:
        entries = snapshot.entries
        kind = snapshot.config.kind
        if not entries:
            return f"Cache is empty; {kind.value} has nothing to rank yet."

        if kind is PolicyKind.LRU:
            victim = _by_recency(entries)[0]
            return f"Next eviction: {victim.key!r}, the least recently used entry."
        if kind is PolicyKind.LFU:
            victim = min(entries, key=lambda e: (e.access_count, e.insertion_seq))
            return (
                f"Next eviction: {victim.key!r}, accessed {victim.access_count} "
                f"time{'s' if victim.access_count != 1 else ''}."
            )
        if kind is PolicyKind.FIFO:
            return f"Next eviction: {entries[0].key!r}, the oldest inserted entry."
        if kind is PolicyKind.RR:
            return f"Any of the {len(entries)} cached entries is equally likely to be evicted next."

        ranks = snapshot.ranks or {}
        victim = min(entries, key=lambda e: (ranks.get(e.key, 0.0), e.insertion_seq))
        avg_quality = statistics.mean(e.quality_score for e in entries)
        return (
            f"Average quality {avg_quality:.3f}; next eviction: {victim.key!r} "
            f"with composite score {ranks.get(victim.key, 0.0):.3f}."
        )


def _utilization(size: int, maxsize: int) -> float:
    return round(size / maxsize * 100, 2) if maxsize else 0.0


def _by_recency(entries: List[CacheEntry]) -> List[CacheEntry]:
    """Least recently used first."""
    return sorted(entries, key=lambda e: e.last_access_seq)


def _entry_size_bytes(entry: CacheEntry) -> int:
    if isinstance(entry.value, bytes):
        value_size = len(entry.value)
    elif isinstance(entry.value, str):
        value_size = len(entry.value.encode("utf-8"))
    else:
        value_size = len(json.dumps(entry.value, default=str).encode("utf-8"))
    return len(entry.key.encode("utf-8")) + value_size
