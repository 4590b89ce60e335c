"""Eviction policy identities and validated parameter sets."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from cache_service.core.errors import ConfigurationError, UnknownPolicyError

WEIGHT_TOLERANCE = 1e-6

DEFAULT_MAXSIZE = 4
DEFAULT_CLEAN_SIZE = 1
DEFAULT_LEARNING_RATE = 0.3
DEFAULT_QUALITY_WEIGHT = 0.8
DEFAULT_RECENCY_WEIGHT = 0.15
DEFAULT_FREQUENCY_WEIGHT = 0.05


class PolicyKind(str, Enum):
    """The closed set of eviction policies."""
    LRU = "LRU"
    LFU = "LFU"
    FIFO = "FIFO"
    RR = "RR"
    QUALITY_SCORE = "quality_score"

    @property
    def family(self) -> str:
        """Policy family reported by status endpoints: memory or advanced."""
        return "advanced" if self is PolicyKind.QUALITY_SCORE else "memory"

    @classmethod
    def parse(cls, name: str) -> "PolicyKind":
        """Resolve a policy name case-insensitively.

        Raises:
            UnknownPolicyError: If the name matches no policy.
        """
        if isinstance(name, PolicyKind):
            return name
        normalized = str(name).strip().lower().replace("-", "_").replace(" ", "_")
        kind = _ALIASES.get(normalized)
        if kind is None:
            raise UnknownPolicyError(str(name), available=[k.value for k in cls])
        return kind


_ALIASES: Dict[str, PolicyKind] = {
    "lru": PolicyKind.LRU,
    "lfu": PolicyKind.LFU,
    "fifo": PolicyKind.FIFO,
    "rr": PolicyKind.RR,
    "random": PolicyKind.RR,
    "random_replacement": PolicyKind.RR,
    "quality_score": PolicyKind.QUALITY_SCORE,
    "qualityscore": PolicyKind.QUALITY_SCORE,
    "quality": PolicyKind.QUALITY_SCORE,
}


@dataclass(frozen=True)
class QualityParams:
    """Quality Score tuning parameters."""

    learning_rate: float = DEFAULT_LEARNING_RATE
    quality_weight: float = DEFAULT_QUALITY_WEIGHT
    recency_weight: float = DEFAULT_RECENCY_WEIGHT
    frequency_weight: float = DEFAULT_FREQUENCY_WEIGHT

    def validate(self) -> None:
        for name in ("learning_rate", "quality_weight", "recency_weight", "frequency_weight"):
            _check_unit_interval(name, getattr(self, name))

        total = self.quality_weight + self.recency_weight + self.frequency_weight
        if abs(total - 1.0) > WEIGHT_TOLERANCE:
            raise ConfigurationError(
                f"quality_weight + recency_weight + frequency_weight must sum to 1.0, got {total:.6g}",
                field="weights",
                value=round(total, 6),
            )

    def weights(self) -> Dict[str, float]:
        return {
            "quality": self.quality_weight,
            "recency": self.recency_weight,
            "frequency": self.frequency_weight,
        }


@dataclass(frozen=True)
class PolicyConfig:
    """Validated configuration for one eviction policy.

    Build instances through `PolicyConfig.create` (or call `validate`) so an
    invalid config never reaches the engine.
    """

    kind: PolicyKind
    maxsize: int = DEFAULT_MAXSIZE
    clean_size: int = DEFAULT_CLEAN_SIZE
    quality: Optional[QualityParams] = None

    @classmethod
    def create(
        cls,
        policy: Any,
        maxsize: Optional[int] = None,
        clean_size: Optional[int] = None,
        learning_rate: Optional[float] = None,
        quality_weight: Optional[float] = None,
        recency_weight: Optional[float] = None,
        frequency_weight: Optional[float] = None,
        defaults: Optional["PolicyDefaults"] = None,
    ) -> "PolicyConfig":
        """Build and validate a config, filling omitted fields with defaults.

        Raises:
            UnknownPolicyError: For an unrecognized policy name.
            ConfigurationError: For out-of-range parameters.
        """
        kind = PolicyKind.parse(policy)
        defaults = defaults or PolicyDefaults()

        quality = None
        if kind is PolicyKind.QUALITY_SCORE:
            quality = QualityParams(
                learning_rate=_pick(learning_rate, defaults.learning_rate),
                quality_weight=_pick(quality_weight, defaults.quality_weight),
                recency_weight=_pick(recency_weight, defaults.recency_weight),
                frequency_weight=_pick(frequency_weight, defaults.frequency_weight),
            )

        config = cls(
            kind=kind,
            maxsize=_pick(maxsize, defaults.maxsize),
            clean_size=_pick(clean_size, defaults.clean_size),
            quality=quality,
        )
        config.validate()
        return config

    def validate(self) -> None:
        """Raise ConfigurationError naming the first offending field."""
        if isinstance(self.maxsize, bool) or not isinstance(self.maxsize, int):
            raise ConfigurationError("maxsize must be an integer", field="maxsize", value=self.maxsize)
        if self.maxsize <= 0:
            raise ConfigurationError("maxsize must be greater than 0", field="maxsize", value=self.maxsize)

        if isinstance(self.clean_size, bool) or not isinstance(self.clean_size, int):
            raise ConfigurationError("clean_size must be an integer", field="clean_size", value=self.clean_size)
        if not 0 < self.clean_size <= self.maxsize:
            raise ConfigurationError(
                f"clean_size must be between 1 and maxsize ({self.maxsize})",
                field="clean_size",
                value=self.clean_size,
            )

        if self.kind is PolicyKind.QUALITY_SCORE:
            if self.quality is None:
                raise ConfigurationError("quality_score policy requires quality parameters", field="quality")
            self.quality.validate()

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "policy": self.kind.value,
            "maxsize": self.maxsize,
            "clean_size": self.clean_size,
        }
        if self.quality is not None:
            data.update(
                learning_rate=self.quality.learning_rate,
                weights=self.quality.weights(),
            )
        return data


@dataclass(frozen=True)
class PolicyDefaults:
    """Values used for parameters a switch request leaves out."""

    maxsize: int = DEFAULT_MAXSIZE
    clean_size: int = DEFAULT_CLEAN_SIZE
    learning_rate: float = DEFAULT_LEARNING_RATE
    quality_weight: float = DEFAULT_QUALITY_WEIGHT
    recency_weight: float = DEFAULT_RECENCY_WEIGHT
    frequency_weight: float = DEFAULT_FREQUENCY_WEIGHT

    @classmethod
    def from_settings(cls, settings) -> "PolicyDefaults":
        return cls(
            maxsize=settings.default_maxsize,
            clean_size=settings.default_clean_size,
            learning_rate=settings.default_learning_rate,
            quality_weight=settings.default_quality_weight,
            recency_weight=settings.default_recency_weight,
            frequency_weight=settings.default_frequency_weight,
        )


def validate_similarity(similarity_score: Any) -> float:
    """Check a similarity score lies in [0, 1] and return it as float."""
    _check_unit_interval("similarity_score", similarity_score)
    return float(similarity_score)


def _check_unit_interval(field: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError(f"{field} must be a number", field=field, value=value)
    if not math.isfinite(value):
        raise ConfigurationError(f"{field} must be between 0 and 1", field=field, value=str(value))
    if not 0.0 <= value <= 1.0:
        raise ConfigurationError(f"{field} must be between 0 and 1", field=field, value=value)


def _pick(value, default):
    return default if value is None else value
