"""Synthetic query workloads with a controllable repetition profile."""

import random
from dataclasses import dataclass
from typing import Dict, List

# (share of the trace that is distinct questions, zipf skew of the draw)
_PROFILES = {
    "HIGH": (0.1, 1.2),
    "MIXED": (0.35, 0.8),
    "LOW": (0.8, 0.0),
}


@dataclass
class Workload:
    """An ordered trace of question keys plus each question's answer quality."""

    degree_of_repetition: str
    queries: List[str]
    similarities: Dict[str, float]
    seed: int

    def __len__(self) -> int:
        return len(self.queries)

    @property
    def distinct_questions(self) -> int:
        return len(set(self.queries))

    def access_similarity(self, question: str, rng: random.Random) -> float:
        """Similarity observed on a repeat access, jittered around the base."""
        base = self.similarities[question]
        return min(1.0, max(0.0, base + rng.gauss(0.0, 0.05)))


def generate_workload(number_of_questions: int, degree_of_repetition: str, seed: int = 42) -> Workload:
    """Build a deterministic trace for the given repetition degree.

    HIGH draws from a small, heavily skewed pool; LOW from a large uniform
    one; MIXED sits between.
    """
    degree = degree_of_repetition.upper()
    if degree not in _PROFILES:
        raise ValueError(f"Unsupported degree of repetition: {degree_of_repetition}")

    rng = random.Random(seed)
    distinct_share, skew = _PROFILES[degree]
    pool_size = max(1, int(number_of_questions * distinct_share))

    pool = [f"question-{i:05d}" for i in range(pool_size)]
    weights = [1.0 / (rank + 1) ** skew for rank in range(pool_size)]
    queries = rng.choices(pool, weights=weights, k=number_of_questions)

    similarities = {question: round(rng.uniform(0.4, 1.0), 4) for question in pool}
    return Workload(
        degree_of_repetition=degree,
        queries=queries,
        similarities=similarities,
        seed=seed,
    )
