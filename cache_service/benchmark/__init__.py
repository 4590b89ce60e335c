"""Eviction policy benchmark: replay synthetic query traces against each policy."""

from cache_service.benchmark.config import BenchmarkConfig
from cache_service.benchmark.results import BenchmarkReport, BenchmarkResult
from cache_service.benchmark.runner import BenchmarkRunner
from cache_service.benchmark.workload import Workload, generate_workload

__all__ = [
    "BenchmarkConfig",
    "BenchmarkReport",
    "BenchmarkResult",
    "BenchmarkRunner",
    "Workload",
    "generate_workload",
]
