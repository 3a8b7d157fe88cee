"""FastAPI dependencies for dependency injection.

Provides reusable dependencies for routes including:
- Database sessions
- Repositories selected by the component factory
- Caller identity and permission checks
"""

import logging
import uuid
from collections.abc import AsyncGenerator, Awaitable, Callable

from fastapi import Depends, Header, HTTPException, Request, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings
from app.core.factory import ComponentFactory
from app.core.permissions import AccessPolicy, Permission
from app.db.models import User
from app.db.session import get_async_session
from app.interfaces.repository import BaseTemplateRepository, BaseUserRepository
from app.strategies.moderation import TemplatePublisher

logger = logging.getLogger(__name__)


def get_app_settings(request: Request) -> Settings:
    """Return the settings the application was created with."""
    return request.app.state.settings


def get_component_factory(request: Request) -> ComponentFactory:
    """Return the factory created at application startup."""
    return request.app.state.factory


def get_access_policy(request: Request) -> AccessPolicy:
    """Return the access policy created at application startup."""
    return request.app.state.access_policy


async def get_db(
    factory: ComponentFactory = Depends(get_component_factory),
    settings: Settings = Depends(get_app_settings),
) -> AsyncGenerator[AsyncSession | None, None]:
    """Dependency for getting async database sessions.

    Yields None when the configured repositories do not use a database.

    Args:
        factory: Component factory.
        settings: Application settings.

    Yields:
        An async database session, or None.
    """
    if not factory.uses_database:
        yield None
        return

    try:
        async for session in get_async_session(settings):
            yield session
    except SQLAlchemyError as e:
        logger.error(f"Error getting database session: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Database connection error",
        ) from e


def get_template_repository(
    factory: ComponentFactory = Depends(get_component_factory),
    session: AsyncSession | None = Depends(get_db),
) -> BaseTemplateRepository:
    return factory.get_template_repository(session)


def get_user_repository(
    factory: ComponentFactory = Depends(get_component_factory),
    session: AsyncSession | None = Depends(get_db),
) -> BaseUserRepository:
    return factory.get_user_repository(session)


def get_publisher(
    factory: ComponentFactory = Depends(get_component_factory),
    repository: BaseTemplateRepository = Depends(get_template_repository),
) -> TemplatePublisher:
    return factory.get_publisher(repository)


async def get_current_user(
    x_user_id: str | None = Header(default=None, description="ID of the calling user"),
    users: BaseUserRepository = Depends(get_user_repository),
) -> User:
    """Dependency for resolving the calling user from the X-User-ID header.

    Args:
        x_user_id: The user ID from the X-User-ID header.
        users: User repository.

    Returns:
        The calling user.

    Raises:
        HTTPException: If the header is missing or invalid, or the user is
            unknown or inactive.
    """
    try:
        if not x_user_id:
            logger.warning("X-User-ID header is missing")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Not authenticated",
            )

        try:
            user_id = uuid.UUID(x_user_id)
        except ValueError as e:
            logger.warning(f"Invalid user ID format: {x_user_id}")
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid user ID format",
            ) from e

        user = await users.get(user_id)
        if user is None:
            logger.warning(f"Unknown user in X-User-ID: {user_id}")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Not authenticated",
            )

        if not user.is_active:
            logger.warning(f"Inactive user attempted access: {user.id}")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Inactive user",
            )

        return user

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Unexpected error in get_current_user: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error processing authentication",
        ) from e


def require_permission(*permissions: Permission) -> Callable[..., Awaitable[User]]:
    """Build a dependency that admits only callers holding every permission.

    Example:
        ```python
        @router.post("")
        async def create(user: User = Depends(require_permission(Permission.CREATE_TEMPLATE))):
            ...
        ```
    """

    async def dependency(
        current_user: User = Depends(get_current_user),
        policy: AccessPolicy = Depends(get_access_policy),
    ) -> User:
        if not policy.allows(current_user.role, *permissions):
            logger.warning(
                f"User {current_user.id} ({current_user.role}) lacks "
                f"{', '.join(p.value for p in permissions)}"
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return current_user

    return dependency
