"""Dependency injection container for the permissions console.

Owns the settings, the ledger backend, the store and the controller so
front ends and tests can swap any of them.

Usage:
    from permissions_console.container import Container

    container = Container()
    controller = container.controller
"""

from functools import cached_property
from typing import TYPE_CHECKING

from permissions_console.config import BackendType, Settings, get_settings
from permissions_console.logging_config import get_logger

if TYPE_CHECKING:
    from permissions_console.backend.interfaces import LedgerBackend
    from permissions_console.controller import PermissionsController
    from permissions_console.store.store import Store

logger = get_logger(__name__)


class Container:
    """Dependency injection container.

    Components are instantiated on first access and cached for reuse. A
    backend can be injected directly, which is how tests and the CLI's
    memory mode provide seeded data:

        container = Container(settings=Settings(), backend=InMemoryLedgerBackend())
    """

    def __init__(
        self,
        settings: Settings | None = None,
        backend: "LedgerBackend | None" = None,
    ) -> None:
        """Initialize the container.

        Args:
            settings: Application settings. If None, loads from environment.
            backend: Ledger backend to use instead of the configured one.
        """
        self._settings = settings or get_settings()
        self._backend_override = backend
        logger.debug(
            "container_created",
            backend_type=self._settings.backend_type.value,
            environment=self._settings.environment.value,
        )

    @property
    def settings(self) -> Settings:
        """Get application settings."""
        return self._settings

    @cached_property
    def backend(self) -> "LedgerBackend":
        """Get the ledger backend selected by settings.backend_type."""
        if self._backend_override is not None:
            return self._backend_override
        if self._settings.backend_type == BackendType.MEMORY:
            return self._create_memory_backend()
        return self._create_http_backend()

    def _create_memory_backend(self) -> "LedgerBackend":
        from permissions_console.backend.memory import InMemoryLedgerBackend

        logger.info("using_memory_backend")
        return InMemoryLedgerBackend()

    def _create_http_backend(self) -> "LedgerBackend":
        from permissions_console.backend.http import HttpLedgerBackend

        logger.info("using_http_backend", url=self._settings.ledger_api_url)
        return HttpLedgerBackend(
            self._settings.ledger_api_url,
            timeout=self._settings.request_timeout,
            poll_interval=self._settings.job_poll_interval,
            job_timeout=self._settings.job_timeout,
        )

    @cached_property
    def store(self) -> "Store":
        """Get the state store."""
        from permissions_console.store.store import Store

        return Store(discard_stale=self._settings.discard_stale_results)

    @cached_property
    def controller(self) -> "PermissionsController":
        """Get the controller bound to this container's store and backend."""
        from permissions_console.controller import PermissionsController

        return PermissionsController(self.store, self.backend)

    async def aclose(self) -> None:
        """Release the backend and cancel pending loaders.

        Should be called during shutdown.
        """
        if "controller" in self.__dict__:
            await self.controller.close()
        elif "backend" in self.__dict__:
            await self.backend.aclose()

    async def __aenter__(self) -> "Container":
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()
