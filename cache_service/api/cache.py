"""Cache data plane: put, get and flush."""

from fastapi import APIRouter, Depends

from cache_service.api.deps import get_engine
from cache_service.core.logging import get_logger
from cache_service.models.cache import (
    FlushResponse,
    GetRequest,
    GetResponse,
    PutRequest,
    PutResponse,
)
from cache_service.services.eviction import EvictionEngine

logger = get_logger(__name__)

router = APIRouter()


@router.post("/put", response_model=PutResponse)
def put(
    request: PutRequest,
    engine: EvictionEngine = Depends(get_engine),
) -> PutResponse:
    """Cache a response, evicting per the active policy when full."""
    result = engine.admit(request.key, request.value, request.similarity_score)
    if result.evicted:
        logger.info(
            f"Admitted {request.key!r}, evicted {len(result.evicted)} entries",
            extra={"policy": engine.policy_kind.value, "evicted": result.evicted_keys},
        )
    return PutResponse(key=result.key, refreshed=result.refreshed, evicted=result.evicted_keys)


@router.post("/get", response_model=GetResponse)
def get(
    request: GetRequest,
    engine: EvictionEngine = Depends(get_engine),
) -> GetResponse:
    """Look up a cached response."""
    result = engine.lookup(request.key, request.similarity_score)
    if not result.hit:
        return GetResponse(found=False, key=request.key)
    return GetResponse(found=True, key=request.key, value=result.value)


@router.post("/flush", response_model=FlushResponse)
def flush(engine: EvictionEngine = Depends(get_engine)) -> FlushResponse:
    """Drop every cached entry; the active policy is kept."""
    engine.flush()
    return FlushResponse()
