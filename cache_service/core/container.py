"""Dependency injection container for service management.

The container owns the process-wide eviction engine. Route handlers reach it
through FastAPI dependencies rather than a module-level singleton, which keeps
the engine replaceable in tests.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Optional, TYPE_CHECKING

from cache_service.core.logging import get_logger

if TYPE_CHECKING:
    from cache_service.core.config import Settings
    from cache_service.services.eviction import (
        EvictionEngine,
        PolicyDefaults,
        StatusReporter,
    )

logger = get_logger(__name__)


class ServiceNotInitializedError(Exception):
    """Raised when accessing a service that hasn't been initialized."""

    def __init__(self, service_name: str):
        super().__init__(f"Service '{service_name}' has not been initialized. "
                         f"Call container.initialize() first.")
        self.service_name = service_name


@dataclass
class ServiceContainer:
    """Centralized container for dependency injection.

    Usage:
        container = ServiceContainer()
        await container.initialize(settings)

        engine = container.engine
        status = container.reporter.status()

        await container.shutdown()
    """

    _engine: Optional[EvictionEngine] = field(default=None, repr=False)
    _reporter: Optional[StatusReporter] = field(default=None, repr=False)
    _policy_defaults: Optional[PolicyDefaults] = field(default=None, repr=False)
    _initialized: bool = field(default=False, repr=True)
    _settings: Optional[Settings] = field(default=None, repr=False)

    async def initialize(self, settings: Settings) -> None:
        """Create the eviction engine with the configured default policy.

        Raises:
            ConfigurationError: If the default policy settings are invalid.
            UnknownPolicyError: If the default policy name is unknown.
        """
        if self._initialized:
            logger.warning("Container already initialized, skipping")
            return

        self._settings = settings
        logger.info("Initializing service container...")

        from cache_service.services.eviction import (
            EvictionEngine,
            PolicyConfig,
            PolicyDefaults,
            StatusReporter,
        )

        self._policy_defaults = PolicyDefaults.from_settings(settings)
        config = PolicyConfig.create(settings.default_policy, defaults=self._policy_defaults)

        self._engine = EvictionEngine(config, rng=random.Random(settings.rr_seed))
        self._reporter = StatusReporter(self._engine, sample_size=settings.status_sample_size)
        logger.info(
            "Eviction engine initialized",
            extra={"policy": config.kind.value, "maxsize": config.maxsize, "clean_size": config.clean_size},
        )

        self._initialized = True
        logger.info("Service container initialized successfully")

    async def shutdown(self) -> None:
        """Drop cache state; nothing is persisted."""
        logger.info("Shutting down service container...")

        if self._engine is not None:
            self._engine.flush()

        self._engine = None
        self._reporter = None
        self._initialized = False
        logger.info("Service container shut down")

    @property
    def is_initialized(self) -> bool:
        """Check if the container is initialized."""
        return self._initialized

    @property
    def settings(self) -> Settings:
        """Get application settings."""
        if self._settings is None:
            raise ServiceNotInitializedError("settings")
        return self._settings

    @property
    def engine(self) -> EvictionEngine:
        """Get the eviction engine instance."""
        if self._engine is None:
            raise ServiceNotInitializedError("engine")
        return self._engine

    @property
    def reporter(self) -> StatusReporter:
        """Get the status reporter instance."""
        if self._reporter is None:
            raise ServiceNotInitializedError("reporter")
        return self._reporter

    @property
    def policy_defaults(self) -> PolicyDefaults:
        """Defaults applied to parameters a switch request omits."""
        if self._policy_defaults is None:
            from cache_service.services.eviction import PolicyDefaults
            return PolicyDefaults()
        return self._policy_defaults

    def set_engine(self, engine: EvictionEngine, sample_size: int = 5) -> None:
        """Set the engine (for testing); rebuilds the reporter around it."""
        from cache_service.services.eviction import StatusReporter

        self._engine = engine
        self._reporter = StatusReporter(engine, sample_size=sample_size)
        self._initialized = True


# Module-level container instance
_container: Optional[ServiceContainer] = None


def get_container() -> ServiceContainer:
    """Get the global service container instance.

    Raises:
        RuntimeError: If the container hasn't been created yet.
    """
    global _container
    if _container is None:
        raise RuntimeError(
            "Service container not created. Call set_container() first "
            "or use the FastAPI app.state.container."
        )
    return _container


def set_container(container: Optional[ServiceContainer]) -> None:
    """Set the global service container instance."""
    global _container
    _container = container
