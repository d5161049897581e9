"""
Dependency injection container implementation.
Constructs every long-lived collaborator explicitly at startup and tears
them down at shutdown, so nothing lives at module level.
"""

import inspect
from typing import Any, Callable, Dict, Optional, Type, TypeVar
import structlog

from ..core.config import Settings
from ..core.database import Database
from ..core.security import SecurityService
from ..events.event_bus import InMemoryEventBus
from ..events.handlers import EventLogHandler, NotificationEventHandler
from ..interfaces.event_interface import IEventBus
from ..interfaces.image_interface import IImageProcessor
from ..interfaces.notification_interface import INotificationService
from ..interfaces.repository_interface import ITaskRepository, IUserRepository
from ..repositories.task_repository import TaskRepository
from ..repositories.user_repository import UserRepository
from ..services.account_service import AccountService
from ..services.authenticator import Authenticator
from ..services.task_service import TaskService
from .service_implementations import PillowImageProcessor, PostmarkNotificationService

logger = structlog.get_logger()

T = TypeVar('T')


class Container:
    """Dependency injection container."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self._services: Dict[str, Any] = {}
        self._singletons: Dict[str, Any] = {}
        self._factories: Dict[str, Callable[[], Any]] = {}
        self._notification_handler: Optional[NotificationEventHandler] = None
        self._initialized = False

        self.register_instance(Settings, settings)

    @property
    def initialized(self) -> bool:
        return self._initialized

    def register_singleton(self, interface: Type[T], implementation: Type[T]) -> None:
        """
        Register a singleton service implementation, built on first use.

        Args:
            interface: Interface type
            implementation: Implementation type
        """
        key = interface.__name__
        self._singletons[key] = implementation
        logger.debug("Registered singleton", interface=key, implementation=implementation.__name__)

    def register_transient(self, interface: Type[T], implementation: Type[T]) -> None:
        """
        Register a transient service implementation, built on every lookup.

        Args:
            interface: Interface type
            implementation: Implementation type
        """
        key = interface.__name__
        self._services[key] = implementation
        logger.debug("Registered transient", interface=key, implementation=implementation.__name__)

    def register_factory(self, interface: Type[T], factory: Callable[[], T]) -> None:
        key = interface.__name__
        self._factories[key] = factory
        logger.debug("Registered factory", interface=key, factory=factory.__name__)

    def register_instance(self, interface: Type[T], instance: T) -> None:
        """Register a ready-made instance for an interface."""
        key = interface.__name__
        self._singletons[key] = instance
        logger.debug("Registered instance", interface=key, instance=type(instance).__name__)

    def is_registered(self, interface: Type[Any]) -> bool:
        key = interface.__name__
        return key in self._singletons or key in self._services or key in self._factories

    def get(self, interface: Type[T]) -> T:
        """
        Get service instance by interface type.

        Args:
            interface: Interface type to resolve

        Returns:
            Service instance

        Raises:
            ValueError: If service is not registered
        """
        key = interface.__name__

        if key in self._factories:
            return self._factories[key]()

        if key in self._singletons:
            singleton = self._singletons[key]
            if not isinstance(singleton, type):
                return singleton

            instance = self._create_instance(singleton)
            self._singletons[key] = instance
            return instance

        if key in self._services:
            return self._create_instance(self._services[key])

        raise ValueError(f"Service not registered: {key}")

    def _create_instance(self, implementation_class: Type[T]) -> T:
        """
        Create instance with dependencies resolved from constructor annotations.

        Args:
            implementation_class: Class to instantiate

        Returns:
            Instantiated object with dependencies resolved
        """
        signature = inspect.signature(implementation_class.__init__)
        parameters = list(signature.parameters.values())[1:]  # skip self

        dependencies = {}
        for param in parameters:
            if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
                continue
            if param.annotation is inspect.Parameter.empty:
                continue
            try:
                dependencies[param.name] = self.get(param.annotation)
            except ValueError as e:
                if param.default is not inspect.Parameter.empty:
                    dependencies[param.name] = param.default
                else:
                    logger.error(
                        "Failed to resolve dependency",
                        class_name=implementation_class.__name__,
                        parameter=param.name,
                        error=str(e)
                    )
                    raise

        instance = implementation_class(**dependencies)
        logger.debug(
            "Created instance with dependencies",
            class_name=implementation_class.__name__,
            dependencies=list(dependencies.keys())
        )
        return instance

    def _register_default(self, interface: Type[T], implementation: Type[T]) -> None:
        # Keep anything registered before initialize(), e.g. test doubles
        if not self.is_registered(interface):
            self.register_singleton(interface, implementation)

    async def initialize(self) -> None:
        """Register default collaborators, connect the database and wire event handlers."""
        if self._initialized:
            return

        try:
            self._register_default(Database, Database)
            self._register_default(SecurityService, SecurityService)
            self._register_default(IEventBus, InMemoryEventBus)
            self._register_default(INotificationService, PostmarkNotificationService)
            self._register_default(IImageProcessor, PillowImageProcessor)
            self._register_default(IUserRepository, UserRepository)
            self._register_default(ITaskRepository, TaskRepository)

            # Request-scoped services are cheap and stateless
            self.register_transient(Authenticator, Authenticator)
            self.register_transient(AccountService, AccountService)
            self.register_transient(TaskService, TaskService)

            await self.get(Database).connect()

            event_bus = self.get(IEventBus)
            self._notification_handler = NotificationEventHandler(self.get(INotificationService))
            await self._notification_handler.register(event_bus)
            await EventLogHandler().register(event_bus)

            self._initialized = True
            logger.info("Dependency injection container initialized successfully")

        except Exception as e:
            logger.error("Failed to initialize container", error=str(e))
            raise

    async def drain_notifications(self) -> None:
        """Wait for notification sends still in flight."""
        if self._notification_handler is not None:
            await self._notification_handler.drain()

    async def cleanup(self) -> None:
        """Release collaborator resources. Errors are logged so every step runs."""
        await self.drain_notifications()
        self._notification_handler = None

        for key, instance in list(self._singletons.items()):
            if isinstance(instance, type) or not hasattr(instance, "cleanup"):
                continue
            try:
                await instance.cleanup()
            except Exception as e:
                logger.error("Failed to cleanup service", service=key, error=str(e))

        event_bus = self._singletons.get(IEventBus.__name__)
        if isinstance(event_bus, InMemoryEventBus):
            await event_bus.clear()

        database = self._singletons.get(Database.__name__)
        if isinstance(database, Database):
            try:
                await database.disconnect()
            except Exception as e:
                logger.error("Failed to disconnect database", error=str(e))

        self._initialized = False
        logger.info("Container cleanup completed")

