"""Tests for status reporting and the policy catalog."""

import pytest

from cache_service.services.eviction import StatusReporter, policy_catalog
from cache_service.services.eviction.reporter import (
    MEMORY_STATUS_FIELDS,
    QUALITY_STATUS_FIELDS,
)


class TestMemoryStatus:

    def test_empty_cache(self, lru_engine):
        status = StatusReporter(lru_engine).status()

        assert set(status) == set(MEMORY_STATUS_FIELDS)
        assert status["cache_size"] == 0
        assert status["max_size"] == 4
        assert status["utilization_percent"] == 0.0
        assert status["policy"] == "LRU"
        assert status["policy_type"] == "memory"
        assert status["access_order"] == []

    def test_populated_cache(self, lru_engine, clock):
        for key in ["a", "b", "c"]:
            lru_engine.admit(key, "xy")
            clock.advance()
        lru_engine.lookup("a")

        status = StatusReporter(lru_engine).status()

        assert status["cache_size"] == 3
        assert status["cache_keys_count"] == 3
        assert status["utilization_percent"] == 75.0
        assert status["access_order"] == ["b", "c", "a"]
        assert status["sample_cached_items"] == ["a", "b", "c"]
        # key (1 byte) + value (2 bytes) per entry
        assert status["current_size_bytes"] == 9

    def test_access_order_ignores_clock_steps(self, lru_engine, clock):
        lru_engine.admit("a", "v")
        clock.advance(10)
        lru_engine.admit("b", "v")
        clock.advance(-60)
        lru_engine.admit("c", "v")
        lru_engine.lookup("a")

        reporter = StatusReporter(lru_engine)

        assert reporter.status()["access_order"] == ["b", "c", "a"]
        assert "'b'" in reporter.stats_summary()["policy_insight"]

    def test_sample_is_bounded(self, make_engine):
        engine = make_engine("FIFO", maxsize=10, clean_size=1)
        for i in range(8):
            engine.admit(f"k{i}", i)

        status = StatusReporter(engine, sample_size=5).status()

        assert status["sample_cached_items"] == ["k0", "k1", "k2", "k3", "k4"]

    def test_non_string_values_are_sized_as_json(self, lru_engine):
        lru_engine.admit("k", {"a": 1})

        status = StatusReporter(lru_engine).status()

        assert status["current_size_bytes"] == len("k") + len('{"a": 1}')


class TestQualityStatus:

    def test_fields_and_values(self, make_engine):
        engine = make_engine("quality_score", maxsize=4, clean_size=1)
        engine.admit("a", "v", similarity_score=0.9)
        engine.admit("b", "v", similarity_score=0.5)
        engine.lookup("a")

        status = StatusReporter(engine).status()

        assert set(status) == set(QUALITY_STATUS_FIELDS)
        assert status["policy"] == "quality_score"
        assert status["cache_size"] == 2
        assert status["total_accesses"] == 1
        assert status["avg_quality_score"] == pytest.approx(0.7)
        assert status["quality_range"] == {"min": 0.5, "max": 0.9}
        assert status["avg_access_count"] == 1.5
        assert status["weights"] == {"quality": 0.8, "recency": 0.15, "frequency": 0.05}
        assert status["learning_rate"] == 0.3

    def test_empty_quality_cache(self, make_engine):
        status = StatusReporter(make_engine("quality_score")).status()

        assert status["cache_size"] == 0
        assert status["avg_quality_score"] == 0.0
        assert status["quality_range"] == {"min": 0.0, "max": 0.0}


class TestStatsSummary:

    def test_summary_shape(self, lru_engine):
        lru_engine.admit("a", 1)
        lru_engine.admit("b", 2)

        summary = StatusReporter(lru_engine).stats_summary()

        assert summary["current_policy"] == "LRU"
        assert summary["cache_utilization"] == "2/4 (50.0%)"
        assert summary["policy_type"] == "memory"
        assert summary["available_stats"] == MEMORY_STATUS_FIELDS
        assert summary["key_metrics"] == {"items_cached": 2, "utilization": 50.0}
        assert "'a'" in summary["policy_insight"]

    def test_empty_insight(self, lru_engine):
        summary = StatusReporter(lru_engine).stats_summary()

        assert summary["policy_insight"].startswith("Cache is empty")

    @pytest.mark.parametrize("policy,fragment", [
        ("LFU", "accessed 1 time."),
        ("FIFO", "oldest inserted"),
        ("RR", "equally likely"),
        ("quality_score", "Average quality"),
    ])
    def test_insight_per_policy(self, make_engine, policy, fragment):
        engine = make_engine(policy)
        engine.admit("a", 1, similarity_score=0.6)

        summary = StatusReporter(engine).stats_summary()

        assert fragment in summary["policy_insight"]

    def test_quality_summary_lists_quality_fields(self, make_engine):
        summary = StatusReporter(make_engine("quality_score")).stats_summary()

        assert summary["policy_type"] == "advanced"
        assert summary["available_stats"] == QUALITY_STATUS_FIELDS

    def test_metrics(self, lru_engine):
        lru_engine.admit("a", 1)
        lru_engine.lookup("a")
        lru_engine.lookup("b")

        metrics = StatusReporter(lru_engine).metrics()

        assert metrics["hits"] == 1
        assert metrics["misses"] == 1
        assert metrics["hit_rate"] == 0.5


class TestPolicyCatalog:

    def test_lists_all_policies(self):
        names = [entry["name"] for entry in policy_catalog()]

        assert names == ["LRU", "LFU", "FIFO", "RR", "quality_score"]

    def test_quality_parameters(self):
        catalog = {entry["name"]: entry for entry in policy_catalog()}

        quality = catalog["quality_score"]
        lru = catalog["LRU"]

        assert quality["type"] == "advanced"
        assert set(quality["parameters"]) == {
            "maxsize",
            "clean_size",
            "learning_rate",
            "quality_weight",
            "recency_weight",
            "frequency_weight",
        }
        assert set(lru["parameters"]) == {"maxsize", "clean_size"}
        assert len(quality["constraints"]) == 2

    def test_size_schemas_hold_numeric_bounds_only(self):
        for entry in policy_catalog():
            for name in ("maxsize", "clean_size"):
                schema = entry["parameters"][name]
                assert schema["type"] == "integer"
                assert all(
                    isinstance(schema[bound], (int, float))
                    for bound in ("minimum", "maximum")
                    if bound in schema
                )
            assert "0 < clean_size <= maxsize" in entry["constraints"]
