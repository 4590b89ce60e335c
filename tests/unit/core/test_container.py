"""Tests for the service container."""

import pytest

from cache_service.core.config import Settings
from cache_service.core.container import (
    ServiceContainer,
    ServiceNotInitializedError,
    get_container,
    set_container,
)
from cache_service.core.errors import ConfigurationError, UnknownPolicyError
from cache_service.services.eviction import PolicyKind


class TestServiceContainer:

    async def test_initialize_builds_engine_from_settings(self):
        container = ServiceContainer()
        settings = Settings(default_policy="quality_score", default_maxsize=8, default_clean_size=2)

        await container.initialize(settings)

        assert container.is_initialized
        assert container.engine.policy_kind is PolicyKind.QUALITY_SCORE
        assert container.engine.config.maxsize == 8
        assert container.policy_defaults.maxsize == 8
        assert container.reporter.status()["cache_size"] == 0

    async def test_initialize_twice_is_a_no_op(self):
        container = ServiceContainer()
        await container.initialize(Settings(default_policy="LRU"))
        engine = container.engine

        await container.initialize(Settings(default_policy="FIFO"))

        assert container.engine is engine

    async def test_invalid_default_policy_settings(self):
        container = ServiceContainer()

        with pytest.raises(ConfigurationError):
            await container.initialize(Settings(default_maxsize=2, default_clean_size=3))

        with pytest.raises(UnknownPolicyError):
            await container.initialize(Settings(default_policy="MRU"))

        assert not container.is_initialized

    async def test_shutdown_releases_engine(self):
        container = ServiceContainer()
        await container.initialize(Settings())

        await container.shutdown()

        assert not container.is_initialized
        with pytest.raises(ServiceNotInitializedError):
            container.engine

    def test_uninitialized_access_raises(self):
        container = ServiceContainer()

        with pytest.raises(ServiceNotInitializedError) as exc_info:
            container.reporter

        assert exc_info.value.service_name == "reporter"

    def test_set_engine(self, lru_engine):
        container = ServiceContainer()

        container.set_engine(lru_engine, sample_size=2)

        assert container.engine is lru_engine
        assert container.reporter.sample_size == 2


class TestGlobalContainer:

    def test_get_before_set_raises(self):
        set_container(None)

        with pytest.raises(RuntimeError):
            get_container()

    def test_set_and_get(self):
        container = ServiceContainer()
        set_container(container)
        try:
            assert get_container() is container
        finally:
            set_container(None)
