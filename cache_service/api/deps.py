from fastapi import Request, Depends
from cache_service.core.container import ServiceContainer, get_container
from cache_service.services.eviction import EvictionEngine, StatusReporter


def get_service_container(request: Request) -> ServiceContainer:
    """Get the service container."""
    # Try getting from app state first (lifespan managed)
    if hasattr(request.app.state, "container"):
        return request.app.state.container
    # Fallback to global (e.g. if testing without full app)
    return get_container()


def get_engine(
    container: ServiceContainer = Depends(get_service_container)
) -> EvictionEngine:
    return container.engine


def get_reporter(
    container: ServiceContainer = Depends(get_service_container)
) -> StatusReporter:
    return container.reporter
