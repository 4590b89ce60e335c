"""Cache control plane: status, policy catalog and policy switching."""

from typing import Any, Dict, List

from fastapi import APIRouter, Depends

from cache_service.api.deps import get_engine, get_reporter, get_service_container
from cache_service.core.container import ServiceContainer
from cache_service.core.logging import get_logger
from cache_service.models.cache import SwitchPolicyRequest, SwitchPolicyResponse
from cache_service.services.eviction import (
    EvictionEngine,
    PolicyConfig,
    StatusReporter,
    policy_catalog,
)
from cache_service.utils.error_handlers import handle_errors

logger = get_logger(__name__)
router = APIRouter(prefix="/cache")


@router.get("/status")
@handle_errors(error_message="Failed to build cache status")
def cache_status(reporter: StatusReporter = Depends(get_reporter)) -> Dict[str, Any]:
    """Current cache status; fields depend on the active policy family."""
    return reporter.status()


@router.get("/stats-summary")
@handle_errors(error_message="Failed to build cache stats summary")
def stats_summary(reporter: StatusReporter = Depends(get_reporter)) -> Dict[str, Any]:
    """Condensed, human-oriented view of the cache."""
    return reporter.stats_summary()


@router.get("/metrics")
@handle_errors(error_message="Failed to build cache metrics")
def cache_metrics(reporter: StatusReporter = Depends(get_reporter)) -> Dict[str, Any]:
    """Hit, miss and eviction counters since the last flush or switch."""
    return reporter.metrics()


@router.get("/policies")
def list_policies() -> Dict[str, List[Dict[str, Any]]]:
    """Catalog of available eviction policies and their parameters."""
    return {"policies": policy_catalog()}


@router.post("/switch-policy", response_model=SwitchPolicyResponse)
def switch_policy(
    request: SwitchPolicyRequest,
    engine: EvictionEngine = Depends(get_engine),
    container: ServiceContainer = Depends(get_service_container),
) -> SwitchPolicyResponse:
    """Swap the eviction policy. The cache is always reset.

    Invalid parameters or an unknown policy name yield a 400 and leave the
    current policy and entries untouched.
    """
    config = PolicyConfig.create(
        request.policy,
        maxsize=request.maxsize,
        clean_size=request.clean_size,
        learning_rate=request.learning_rate,
        quality_weight=request.quality_weight,
        recency_weight=request.recency_weight,
        frequency_weight=request.frequency_weight,
        defaults=container.policy_defaults,
    )
    result = engine.switch_policy(config)
    return SwitchPolicyResponse(
        message=result.message,
        policy=result.policy,
        maxsize=result.maxsize,
        clean_size=result.clean_size,
        cache_reset=result.cache_reset,
    )
