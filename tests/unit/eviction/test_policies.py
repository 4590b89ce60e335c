"""Tests for the individual eviction policies."""

import random

import pytest

from cache_service.services.eviction.entry_store import EntryStore
from cache_service.services.eviction.policies import (
    FIFOPolicy,
    LFUPolicy,
    LRUPolicy,
    QualityScorePolicy,
    RandomReplacementPolicy,
    create_policy,
)
from cache_service.services.eviction.policy_config import PolicyConfig, PolicyKind


def _fill(policy, keys, similarity=0.5, start=0.0):
    """Admit keys one second apart; returns the store."""
    store = EntryStore()
    for seq, key in enumerate(keys, start=1):
        store.put(key, policy.on_admit(key, f"v-{key}", similarity, start + seq, seq=seq))
    return store


class TestCreatePolicy:

    @pytest.mark.parametrize("name,cls", [
        ("LRU", LRUPolicy),
        ("LFU", LFUPolicy),
        ("FIFO", FIFOPolicy),
        ("RR", RandomReplacementPolicy),
        ("quality_score", QualityScorePolicy),
    ])
    def test_factory_dispatch(self, name, cls):
        policy = create_policy(PolicyConfig.create(name))
        assert isinstance(policy, cls)
        assert policy.kind is PolicyKind.parse(name)

    def test_rr_receives_injected_rng(self):
        rng = random.Random(3)
        policy = create_policy(PolicyConfig.create("rr"), rng=rng)
        assert policy.rng is rng


class TestLRUPolicy:

    def test_evicts_least_recently_accessed(self):
        policy = LRUPolicy(PolicyConfig.create("lru"))
        store = _fill(policy, ["a", "b", "c"])

        policy.on_hit(store.get("a"), now=10.0, seq=10)

        assert policy.select_eviction_candidates(store, 2) == ["b", "c"]

    def test_timestamp_ties_fall_back_to_order(self):
        policy = LRUPolicy(PolicyConfig.create("lru"))
        store = EntryStore()
        for seq, key in enumerate(["a", "b", "c"], start=1):
            store.put(key, policy.on_admit(key, key, 0.5, 1.0, seq=seq))

        assert policy.select_eviction_candidates(store, 1) == ["a"]


class TestLFUPolicy:

    def test_evicts_least_frequently_used(self):
        policy = LFUPolicy(PolicyConfig.create("lfu"))
        store = _fill(policy, ["a", "b", "c"])

        policy.on_hit(store.get("a"), now=10.0, seq=10)
        policy.on_hit(store.get("a"), now=11.0, seq=11)
        policy.on_hit(store.get("c"), now=12.0, seq=12)

        assert store.get("a").access_count == 3
        assert policy.select_eviction_candidates(store, 1) == ["b"]

    def test_ties_go_to_oldest_insert(self):
        policy = LFUPolicy(PolicyConfig.create("lfu"))
        store = _fill(policy, ["x", "y", "z"])

        assert policy.select_eviction_candidates(store, 2) == ["x", "y"]


class TestFIFOPolicy:

    def test_ignores_accesses(self):
        policy = FIFOPolicy(PolicyConfig.create("fifo"))
        store = _fill(policy, ["a", "b", "c"])

        for seq in range(10, 15):
            policy.on_hit(store.get("a"), now=float(seq), seq=seq)

        assert policy.select_eviction_candidates(store, 2) == ["a", "b"]


class TestRandomReplacementPolicy:

    def test_seeded_selection_is_reproducible(self):
        keys = ["a", "b", "c", "d", "e"]
        policy = RandomReplacementPolicy(PolicyConfig.create("rr"), rng=random.Random(11))
        store = _fill(policy, keys)

        expected = random.Random(11).sample(keys, 2)

        assert policy.select_eviction_candidates(store, 2) == expected

    def test_draws_without_replacement(self):
        policy = RandomReplacementPolicy(PolicyConfig.create("rr"), rng=random.Random(0))
        store = _fill(policy, ["a", "b", "c"])

        candidates = policy.select_eviction_candidates(store, 5)

        assert sorted(candidates) == ["a", "b", "c"]


class TestQualityScorePolicy:

    def _policy(self, **params):
        return QualityScorePolicy(PolicyConfig.create("quality_score", **params))

    def test_admit_sets_quality_to_similarity(self):
        policy = self._policy()

        entry = policy.on_admit("k", "v", 0.73, 1.0, seq=1)

        assert entry.quality_score == 0.73
        assert entry.similarity_score == 0.73
        assert entry.access_count == 1

    def test_hit_applies_moving_average(self):
        policy = self._policy(learning_rate=0.3)
        entry = policy.on_admit("k", "v", 0.5, 1.0, seq=1)

        policy.on_hit(entry, 2.0, similarity_score=1.0, seq=2)

        assert entry.quality_score == pytest.approx(0.65)

        policy.on_hit(entry, 3.0, similarity_score=0.0, seq=3)

        assert entry.quality_score == pytest.approx(0.455)

    def test_hit_without_similarity_keeps_quality(self):
        policy = self._policy()
        entry = policy.on_admit("k", "v", 0.4, 1.0, seq=1)

        policy.on_hit(entry, 2.0, seq=2)

        assert entry.quality_score == pytest.approx(0.4)
        assert entry.access_count == 2
        assert entry.last_accessed_at == 2.0

    def test_low_quality_evicted_first(self):
        policy = self._policy()
        store = EntryStore()
        store.put("good", policy.on_admit("good", "v", 0.9, 1.0, seq=1))
        store.put("poor", policy.on_admit("poor", "v", 0.2, 1.0, seq=2))

        assert policy.select_eviction_candidates(store, 1) == ["poor"]

    def test_recency_only_weights_behave_like_lru(self):
        policy = self._policy(quality_weight=0.0, recency_weight=1.0, frequency_weight=0.0)
        store = _fill(policy, ["a", "b", "c"], similarity=0.5)

        policy.on_hit(store.get("a"), now=10.0, seq=10)

        assert policy.select_eviction_candidates(store, 1) == ["b"]

    def test_frequency_only_weights_behave_like_lfu(self):
        policy = self._policy(quality_weight=0.0, recency_weight=0.0, frequency_weight=1.0)
        store = _fill(policy, ["a", "b", "c"])

        policy.on_hit(store.get("a"), now=10.0, seq=10)
        policy.on_hit(store.get("c"), now=11.0, seq=11)

        assert policy.select_eviction_candidates(store, 1) == ["b"]

    def test_composite_ranks_are_bounded(self):
        policy = self._policy()
        store = _fill(policy, ["a", "b", "c", "d"], similarity=1.0)
        policy.on_hit(store.get("b"), now=20.0, similarity_score=0.0, seq=20)

        ranks = policy.composite_ranks(store)

        assert set(ranks) == {"a", "b", "c", "d"}
        assert all(0.0 <= rank <= 1.0 for rank in ranks.values())

    def test_recency_lifts_a_weaker_entry(self):
        policy = self._policy(quality_weight=0.5, recency_weight=0.5, frequency_weight=0.0)
        store = EntryStore()
        store.put("stale", policy.on_admit("stale", "v", 0.6, 0.0, seq=1))
        store.put("fresh", policy.on_admit("fresh", "v", 0.5, 100.0, seq=2))

        assert policy.select_eviction_candidates(store, 1) == ["stale"]

    def test_describe_includes_parameters(self):
        info = self._policy(learning_rate=0.5).describe()

        assert info["name"] == "quality_score"
        assert info["type"] == "advanced"
        assert info["learning_rate"] == 0.5
        assert info["weights"]["quality"] == 0.8
