"""Pluggable eviction engine for the response cache.

Policies:
- LRU: least recently used
- LFU: least frequently used
- FIFO: first in, first out
- RR: random replacement
- quality_score: blended similarity quality, recency and frequency

Usage:
    from cache_service.services.eviction import EvictionEngine, PolicyConfig

    engine = EvictionEngine(PolicyConfig.create("lru", maxsize=100, clean_size=10))
    engine.admit("question", "answer", similarity_score=0.92)
    result = engine.lookup("question")

    engine.switch_policy(PolicyConfig.create("quality_score", maxsize=100))
"""

from cache_service.services.eviction.entry_store import CacheEntry, EntryStore
from cache_service.services.eviction.policy_config import (
    PolicyConfig,
    PolicyDefaults,
    PolicyKind,
    QualityParams,
)
from cache_service.services.eviction.policies import (
    EvictionPolicy,
    LRUPolicy,
    LFUPolicy,
    FIFOPolicy,
    RandomReplacementPolicy,
    QualityScorePolicy,
    create_policy,
)
from cache_service.services.eviction.engine import (
    AdmitResult,
    CacheStats,
    EvictionEngine,
    EvictionNotice,
    LookupResult,
    SwitchResult,
)
from cache_service.services.eviction.reporter import StatusReporter
from cache_service.services.eviction.catalog import policy_catalog

__all__ = [
    "CacheEntry",
    "EntryStore",
    "PolicyConfig",
    "PolicyDefaults",
    "PolicyKind",
    "QualityParams",
    "EvictionPolicy",
    "LRUPolicy",
    "LFUPolicy",
    "FIFOPolicy",
    "RandomReplacementPolicy",
    "QualityScorePolicy",
    "create_policy",
    "AdmitResult",
    "CacheStats",
    "EvictionEngine",
    "EvictionNotice",
    "LookupResult",
    "SwitchResult",
    "StatusReporter",
    "policy_catalog",
]
