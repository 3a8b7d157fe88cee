"""Component Factory for strategy instantiation.

The Factory Pattern allows the application to choose the persistence
strategy at runtime based on configuration or environment variables.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings, get_settings
from app.interfaces.repository import BaseTemplateRepository, BaseUserRepository
from app.strategies.moderation import TemplatePublisher
from app.strategies.repositories import (
    InMemoryTemplateRepository,
    InMemoryUserRepository,
    SqlTemplateRepository,
    SqlUserRepository,
)

logger = logging.getLogger(__name__)


class ComponentFactory:
    """Factory for creating repositories and services based on configuration.

    SQL repositories wrap a request-scoped session and are created per call.
    In-memory repositories hold state, so one instance of each is cached for
    the lifetime of the factory.

    Example:
        ```python
        factory = ComponentFactory(get_settings())

        templates = factory.get_template_repository(session)
        publisher = factory.get_publisher(templates)
        ```
    """

    def __init__(self, settings: Settings | None = None) -> None:
        """Initialize the factory with optional settings.

        Args:
            settings: Application settings. If None, uses global settings.
        """
        self._settings = settings or get_settings()
        self._memory_templates: InMemoryTemplateRepository | None = None
        self._memory_users: InMemoryUserRepository | None = None

    @property
    def uses_database(self) -> bool:
        return self._settings.repository_type == "sql"

    def get_template_repository(
        self,
        session: AsyncSession | None = None,
        repository_type: str | None = None,
    ) -> BaseTemplateRepository:
        """Get a template repository for the configured backend.

        Args:
            session: Open session, required for the SQL backend.
            repository_type: Override of ``settings.repository_type``.

        Returns:
            A BaseTemplateRepository implementation instance.

        Raises:
            ValueError: If the type is unknown or a session is missing.
        """
        repository_type = repository_type or self._settings.repository_type

        match repository_type:
            case "sql":
                if session is None:
                    raise ValueError("A database session is required for the SQL repository")
                return SqlTemplateRepository(session)
            case "memory":
                if self._memory_templates is None:
                    logger.info("Instantiating in-memory template repository")
                    self._memory_templates = InMemoryTemplateRepository()
                return self._memory_templates
            case _:
                raise ValueError(
                    f"Unknown repository type: {repository_type}. "
                    f"Valid options: 'sql', 'memory'"
                )

    def get_user_repository(
        self,
        session: AsyncSession | None = None,
        repository_type: str | None = None,
    ) -> BaseUserRepository:
        """Get a user repository for the configured backend.

        Args:
            session: Open session, required for the SQL backend.
            repository_type: Override of ``settings.repository_type``.

        Returns:
            A BaseUserRepository implementation instance.

        Raises:
            ValueError: If the type is unknown or a session is missing.
        """
        repository_type = repository_type or self._settings.repository_type

        match repository_type:
            case "sql":
                if session is None:
                    raise ValueError("A database session is required for the SQL repository")
                return SqlUserRepository(session)
            case "memory":
                if self._memory_users is None:
                    logger.info("Instantiating in-memory user repository")
                    self._memory_users = InMemoryUserRepository()
                return self._memory_users
            case _:
                raise ValueError(
                    f"Unknown repository type: {repository_type}. "
                    f"Valid options: 'sql', 'memory'"
                )

    def get_publisher(self, repository: BaseTemplateRepository) -> TemplatePublisher:
        """Get a publisher operating on the given repository."""
        return TemplatePublisher(repository)
