"""Static catalog of the eviction policies the service offers."""

from typing import Any, Dict, List

from cache_service.services.eviction.policies import policy_classes
from cache_service.services.eviction.policy_config import (
    DEFAULT_CLEAN_SIZE,
    DEFAULT_FREQUENCY_WEIGHT,
    DEFAULT_LEARNING_RATE,
    DEFAULT_MAXSIZE,
    DEFAULT_QUALITY_WEIGHT,
    DEFAULT_RECENCY_WEIGHT,
    PolicyKind,
)

_SIZE_PARAMETERS: Dict[str, Dict[str, Any]] = {
    "maxsize": {
        "type": "integer",
        "minimum": 1,
        "default": DEFAULT_MAXSIZE,
        "description": "Maximum number of cached entries",
    },
    "clean_size": {
        "type": "integer",
        "minimum": 1,
        "default": DEFAULT_CLEAN_SIZE,
        "description": "Entries evicted per overflow event, at most maxsize",
    },
}


def _unit(default: float, description: str) -> Dict[str, Any]:
    return {"type": "number", "minimum": 0.0, "maximum": 1.0, "default": default, "description": description}


_QUALITY_PARAMETERS: Dict[str, Dict[str, Any]] = {
    "learning_rate": _unit(DEFAULT_LEARNING_RATE, "Step size of the quality moving average"),
    "quality_weight": _unit(DEFAULT_QUALITY_WEIGHT, "Weight of answer quality in the eviction rank"),
    "recency_weight": _unit(DEFAULT_RECENCY_WEIGHT, "Weight of recency in the eviction rank"),
    "frequency_weight": _unit(DEFAULT_FREQUENCY_WEIGHT, "Weight of access frequency in the eviction rank"),
}


def policy_catalog() -> List[Dict[str, Any]]:
    """Name, description, family and parameter schema of every policy."""
    catalog = []
    for policy_cls in policy_classes():
        parameters = dict(_SIZE_PARAMETERS)
        constraints: List[str] = ["0 < clean_size <= maxsize"]
        if policy_cls.kind is PolicyKind.QUALITY_SCORE:
            parameters.update(_QUALITY_PARAMETERS)
            constraints.append("quality_weight + recency_weight + frequency_weight == 1.0")

        catalog.append({
            "name": policy_cls.kind.value,
            "description": policy_cls.description,
            "type": policy_cls.kind.family,
            "parameters": parameters,
            "constraints": constraints,
        })
    return catalog
