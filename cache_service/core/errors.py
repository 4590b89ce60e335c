"""Custom error types for the cache service."""

from typing import Optional, Dict, Any
from enum import Enum
from datetime import datetime, timezone


class ErrorCategory(Enum):
    """Categories of errors for better handling."""
    CONFIGURATION = "configuration"
    UNKNOWN_POLICY = "unknown_policy"
    NOT_FOUND = "not_found"
    INVARIANT = "invariant"
    VALIDATION = "validation"


class CacheServiceError(Exception):
    """Base exception for cache service errors."""

    status_code: int = 400

    def __init__(
        self,
        message: str,
        category: ErrorCategory,
        details: Optional[Dict[str, Any]] = None,
        recoverable: bool = True,
    ):
        super().__init__(message)
        self.message = message
        self.category = category
        self.details = details or {}
        self.recoverable = recoverable
        self.timestamp = datetime.now(timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for logging/response."""
        return {
            "error": self.message,
            "category": self.category.value,
            "details": self.details,
            "recoverable": self.recoverable,
            "timestamp": self.timestamp.isoformat(),
        }


class ConfigurationError(CacheServiceError):
    """Invalid policy parameters (sizes, weights, learning rate, similarity)."""

    def __init__(self, message: str, field: str, value: Optional[Any] = None):
        details = {"field": field}
        if value is not None:
            details["value"] = value

        super().__init__(
            message=message,
            category=ErrorCategory.CONFIGURATION,
            details=details,
        )
        self.field = field


class UnknownPolicyError(CacheServiceError):
    """Unrecognized eviction policy name."""

    def __init__(self, policy: str, available: Optional[list] = None):
        message = f"Unknown eviction policy: {policy!r}"
        if available:
            message += f". Available policies: {', '.join(available)}"

        super().__init__(
            message=message,
            category=ErrorCategory.UNKNOWN_POLICY,
            details={"policy": policy},
        )
        self.policy = policy


class KeyNotFoundError(CacheServiceError, KeyError):
    """Key is not present in the entry store.

    A lookup miss is not an error; this is only raised by direct store
    removal of an absent key.
    """

    status_code = 404

    def __init__(self, key: str):
        super().__init__(
            message=f"Key not found: {key!r}",
            category=ErrorCategory.NOT_FOUND,
            details={"key": key},
        )
        self.key = key

    def __str__(self) -> str:
        return self.message


class CapacityInvariantViolation(CacheServiceError):
    """Capacity bookkeeping broke; indicates a bug, never a caller mistake."""

    status_code = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            category=ErrorCategory.INVARIANT,
            details=details,
            recoverable=False,
        )
