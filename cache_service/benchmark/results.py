"""Result data models for policy benchmarks."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


@dataclass
class BenchmarkResult:
    """Hit rate and throughput of one policy on one workload and cache size."""

    id: int
    number_of_questions: int
    degree_of_repetition: str
    eviction_base: str  # quality_score, memory
    eviction_policy: str
    max_size: int
    hit_rate: float
    throughput: float  # queries per second
    learning_rate: Optional[float] = None
    quality_weight: Optional[float] = None
    recency_weight: Optional[float] = None
    frequency_weight: Optional[float] = None
    evictions: int = 0
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "number_of_questions": self.number_of_questions,
            "degree_of_repetition": self.degree_of_repetition,
            "eviction_base": self.eviction_base,
            "eviction_policy": self.eviction_policy,
            "max_size": self.max_size,
            "learning_rate": self.learning_rate,
            "quality_weight": self.quality_weight,
            "recency_weight": self.recency_weight,
            "frequency_weight": self.frequency_weight,
            "hit_rate": self.hit_rate,
            "throughput": self.throughput,
            "evictions": self.evictions,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BenchmarkResult":
        return cls(
            id=data["id"],
            number_of_questions=data["number_of_questions"],
            degree_of_repetition=data["degree_of_repetition"],
            eviction_base=data["eviction_base"],
            eviction_policy=data["eviction_policy"],
            max_size=data["max_size"],
            hit_rate=data["hit_rate"],
            throughput=data.get("throughput", 0.0),
            learning_rate=data.get("learning_rate"),
            quality_weight=data.get("quality_weight"),
            recency_weight=data.get("recency_weight"),
            frequency_weight=data.get("frequency_weight"),
            evictions=data.get("evictions", 0),
            timestamp=data.get("timestamp", ""),
        )


@dataclass
class BenchmarkReport:
    """All results of a benchmark run."""

    results: List[BenchmarkResult] = field(default_factory=list)
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    completed_at: Optional[datetime] = None

    def average_hit_rates(self) -> Dict[str, float]:
        """Mean hit rate per policy across sizes and parameter sets."""
        grouped: Dict[str, List[float]] = {}
        for result in self.results:
            grouped.setdefault(result.eviction_policy, []).append(result.hit_rate)
        return {policy: sum(rates) / len(rates) for policy, rates in grouped.items()}

    def best_policy(self) -> Optional[Dict[str, Any]]:
        """Policy with the highest mean hit rate and its lead over the runner-up."""
        averages = self.average_hit_rates()
        if not averages:
            return None

        ranked = sorted(averages.items(), key=lambda item: item[1], reverse=True)
        policy, rate = ranked[0]
        improvement = None
        if len(ranked) > 1 and ranked[1][1] > 0:
            improvement = (rate - ranked[1][1]) / ranked[1][1] * 100

        return {"policy": policy, "rate": rate, "improvement_percent": improvement}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "best_policy": self.best_policy(),
            "results": [result.to_dict() for result in self.results],
        }
