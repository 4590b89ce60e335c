"""Replays workloads against every eviction policy."""

import itertools
import random
import time
from datetime import datetime, timezone
from typing import Callable, List, Optional

from cache_service.benchmark.config import BenchmarkConfig
from cache_service.benchmark.results import BenchmarkReport, BenchmarkResult
from cache_service.benchmark.workload import Workload, generate_workload
from cache_service.core.logging import get_logger
from cache_service.services.eviction import EvictionEngine, PolicyConfig, PolicyKind

logger = get_logger(__name__)

ProgressCallback = Callable[[int, int, str], None]


class BenchmarkRunner:
    """Runs every configured policy and cache size over one workload."""

    def __init__(self, config: BenchmarkConfig, workload: Optional[Workload] = None):
        errors = config.validate()
        if errors:
            raise ValueError(f"Invalid benchmark configuration: {'; '.join(errors)}")

        self.config = config
        self.workload = workload or generate_workload(
            config.number_of_questions,
            config.degree_of_repetition,
            seed=config.seed,
        )

    def policy_configs(self, max_size: int) -> List[PolicyConfig]:
        """Every policy/parameter combination to try at one cache size."""
        clean_size = min(self.config.clean_size, max_size)
        configs = []
        for kind in self.config.policy_kinds():
            if kind is not PolicyKind.QUALITY_SCORE:
                configs.append(PolicyConfig.create(kind, maxsize=max_size, clean_size=clean_size))
                continue
            for learning_rate in self.config.learning_rates:
                for quality_weight, recency_weight, frequency_weight in self.config.weight_sets:
                    configs.append(PolicyConfig.create(
                        kind,
                        maxsize=max_size,
                        clean_size=clean_size,
                        learning_rate=learning_rate,
                        quality_weight=quality_weight,
                        recency_weight=recency_weight,
                        frequency_weight=frequency_weight,
                    ))
        return configs

    def run(self, progress_callback: Optional[ProgressCallback] = None) -> BenchmarkReport:
        """Run the full grid.

        Args:
            progress_callback: Optional callback(current, total, message)
        """
        report = BenchmarkReport()
        grid = [
            (max_size, policy_config)
            for max_size in sorted(self.config.max_sizes)
            for policy_config in self.policy_configs(max_size)
        ]

        for index, (max_size, policy_config) in enumerate(grid, start=1):
            if progress_callback:
                progress_callback(index, len(grid), f"{policy_config.kind.value} @ {max_size}")
            report.results.append(self.run_once(policy_config, result_id=index))

        report.completed_at = datetime.now(timezone.utc)
        logger.info(
            "Benchmark complete",
            extra={"runs": len(report.results), "degree_of_repetition": self.workload.degree_of_repetition},
        )
        return report

    def run_once(self, policy_config: PolicyConfig, result_id: int = 0) -> BenchmarkResult:
        """Replay the workload against a fresh engine: lookup, admit on miss."""
        ticks = itertools.count()
        rng = random.Random(self.config.seed)
        engine = EvictionEngine(
            policy_config,
            clock=lambda: float(next(ticks)),
            rng=rng,
        )

        started = time.perf_counter()
        for question in self.workload.queries:
            similarity = self.workload.access_similarity(question, rng)
            if not engine.lookup(question, similarity).hit:
                engine.admit(question, f"answer for {question}", self.workload.similarities[question])
        elapsed = time.perf_counter() - started

        stats = engine.stats
        quality = policy_config.quality
        return BenchmarkResult(
            id=result_id,
            number_of_questions=len(self.workload),
            degree_of_repetition=self.workload.degree_of_repetition,
            eviction_base=policy_config.kind.value if quality else "memory",
            eviction_policy=policy_config.kind.value,
            max_size=policy_config.maxsize,
            hit_rate=stats.hit_rate,
            throughput=len(self.workload) / elapsed if elapsed > 0 else 0.0,
            learning_rate=quality.learning_rate if quality else None,
            quality_weight=quality.quality_weight if quality else None,
            recency_weight=quality.recency_weight if quality else None,
            frequency_weight=quality.frequency_weight if quality else None,
            evictions=stats.evictions,
        )
