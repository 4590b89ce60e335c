"""Benchmark configuration."""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from cache_service.core.errors import UnknownPolicyError
from cache_service.services.eviction.policy_config import WEIGHT_TOLERANCE, PolicyKind

REPETITION_DEGREES = ("HIGH", "LOW", "MIXED")


@dataclass
class BenchmarkConfig:
    """Configuration for a policy benchmark run."""

    # Workload
    number_of_questions: int = 500
    degree_of_repetition: str = "HIGH"  # HIGH, LOW, MIXED
    seed: int = 42

    # Cache shapes to compare
    max_sizes: List[int] = field(default_factory=lambda: [10, 25, 50, 100])
    clean_size: int = 1
    policies: List[str] = field(
        default_factory=lambda: ["quality_score", "LRU", "LFU", "FIFO", "RR"]
    )

    # Quality Score parameter grid
    learning_rates: List[float] = field(default_factory=lambda: [0.5])
    weight_sets: List[Tuple[float, float, float]] = field(
        default_factory=lambda: [(0.6, 0.3, 0.1), (0.8, 0.1, 0.1)]
    )

    # Output config
    output_format: str = "json"  # json, table
    output_path: Optional[str] = None
    verbose: bool = False

    def validate(self) -> List[str]:
        """Validate configuration and return list of errors."""
        errors = []

        if self.number_of_questions <= 0:
            errors.append("number_of_questions must be positive")

        if self.degree_of_repetition.upper() not in REPETITION_DEGREES:
            errors.append(f"degree_of_repetition must be one of {REPETITION_DEGREES}")

        if not self.max_sizes:
            errors.append("max_sizes must not be empty")
        elif any(size <= 0 for size in self.max_sizes):
            errors.append("all max_sizes must be positive")

        if self.clean_size <= 0:
            errors.append("clean_size must be positive")

        if not self.policies:
            errors.append("policies must not be empty")
        for policy in self.policies:
            try:
                PolicyKind.parse(policy)
            except UnknownPolicyError:
                errors.append(f"unknown policy: {policy}")

        if any(lr < 0 or lr > 1 for lr in self.learning_rates):
            errors.append("learning_rates must be between 0 and 1")

        for weights in self.weight_sets:
            if len(weights) != 3:
                errors.append(f"weight set {weights} must have three values")
            elif abs(sum(weights) - 1.0) > WEIGHT_TOLERANCE:
                errors.append(f"weight set {weights} must sum to 1.0")

        valid_formats = {"json", "table"}
        if self.output_format not in valid_formats:
            errors.append(f"output_format must be one of {valid_formats}")

        return errors

    def policy_kinds(self) -> List[PolicyKind]:
        return [PolicyKind.parse(policy) for policy in self.policies]
