"""Shared test fixtures for cache service tests."""

import random

import pytest
from httpx import ASGITransport, AsyncClient

from cache_service.core.container import ServiceContainer
from cache_service.services.eviction import EvictionEngine, PolicyConfig


class FakeClock:
    """Manually advanced clock for deterministic timestamps."""

    def __init__(self, start: float = 1_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float = 1.0) -> float:
        self.now += seconds
        return self.now


# ============================================================================
# Engine Fixtures
# ============================================================================

@pytest.fixture
def clock():
    """A fresh fake clock."""
    return FakeClock()


@pytest.fixture
def make_engine(clock):
    """Factory building an engine on the fake clock with a seeded RNG."""

    def _make(policy="LRU", seed=0, **params):
        config = PolicyConfig.create(policy, **params)
        return EvictionEngine(config, clock=clock, rng=random.Random(seed))

    return _make


@pytest.fixture
def lru_engine(make_engine):
    """LRU engine with room for four entries."""
    return make_engine("LRU", maxsize=4, clean_size=1)


# ============================================================================
# API Fixtures
# ============================================================================

@pytest.fixture
def container(lru_engine):
    """Service container wired to the LRU engine."""
    container = ServiceContainer()
    container.set_engine(lru_engine)
    return container


@pytest.fixture
def app(container):
    """FastAPI app with the test container in app state."""
    from cache_service.core.app_factory import create_app

    app = create_app()
    app.state.container = container
    return app


@pytest.fixture
async def client(app):
    """HTTP client talking to the app in-process."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client
