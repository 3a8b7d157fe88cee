"""SQL repository implementation.

Persists marketplace data through an async SQLAlchemy session. Publication
transitions are a conditional UPDATE committed together with the audit
row, so two concurrent decisions on one template cannot both succeed.
"""

import logging
import uuid
from collections.abc import Mapping
from typing import Any

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models import AdminAction, Template, TemplateStatus, User
from app.interfaces.repository import BaseTemplateRepository, BaseUserRepository, TemplatePage

logger = logging.getLogger(__name__)


class SqlUserRepository(BaseUserRepository):
    """User storage backed by the ``users`` table."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, user_id: uuid.UUID) -> User | None:
        return await self._session.get(User, user_id)

    async def get_by_email(self, email: str) -> User | None:
        result = await self._session.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def add(self, user: User) -> User:
        try:
            self._session.add(user)
            await self._session.commit()
            await self._session.refresh(user)
        except SQLAlchemyError as e:
            logger.error(f"Database error creating user: {e}", exc_info=True)
            await self._session.rollback()
            raise

        return user


class SqlTemplateRepository(BaseTemplateRepository):
    """Template storage backed by the ``templates`` and ``admin_actions`` tables.

    Attributes:
        session: The async session all statements run in.
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository.

        Args:
            session: An open async session, typically request scoped.
        """
        self._session = session

    async def get(self, template_id: uuid.UUID) -> Template | None:
        return await self._session.get(Template, template_id)

    async def add(self, template: Template) -> Template:
        try:
            self._session.add(template)
            await self._session.commit()
            await self._session.refresh(template)
        except SQLAlchemyError as e:
            logger.error(f"Database error creating template: {e}", exc_info=True)
            await self._session.rollback()
            raise

        logger.info(f"Stored template {template.id}")
        return template

    async def update_content(
        self,
        template_id: uuid.UUID,
        changes: Mapping[str, Any],
    ) -> Template | None:
        template = await self.get(template_id)
        if template is None:
            return None

        try:
            for name, value in changes.items():
                setattr(template, name, value)
            self._session.add(template)
            await self._session.commit()
            await self._session.refresh(template)
        except SQLAlchemyError as e:
            logger.error(f"Database error updating template {template_id}: {e}", exc_info=True)
            await self._session.rollback()
            raise

        return template

    async def list_by_status(
        self,
        status: TemplateStatus,
        page: int = 1,
        page_size: int = 20,
    ) -> TemplatePage:
        query = select(Template).where(Template.status == status)

        count_query = select(func.count()).select_from(query.subquery())
        count_result = await self._session.execute(count_query)
        total = count_result.scalar_one() or 0

        query = (
            query.order_by(Template.created_at.asc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        result = await self._session.execute(query)

        return TemplatePage(
            items=list(result.scalars().all()),
            total=total,
            page=page,
            page_size=page_size,
        )

    async def transition_status(
        self,
        template_id: uuid.UUID,
        *,
        expected: TemplateStatus,
        target: TemplateStatus,
        changes: Mapping[str, Any],
        audit: AdminAction,
    ) -> Template | None:
        statement = (
            update(Template)
            .where(Template.id == template_id, Template.status == expected)
            .values(status=target, **changes)
            .returning(Template.id)
        )

        try:
            result = await self._session.execute(statement)
            if result.scalar_one_or_none() is None:
                await self._session.rollback()
                logger.debug(f"Conditional update matched no row for template {template_id}")
                return None

            self._session.add(audit)
            await self._session.commit()
        except SQLAlchemyError as e:
            logger.error(
                f"Database error transitioning template {template_id}: {e}", exc_info=True
            )
            await self._session.rollback()
            raise

        return await self._session.get(Template, template_id, populate_existing=True)
