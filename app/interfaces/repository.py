"""Abstract base classes for marketplace persistence.

The Strategy Pattern lets the API and the publisher run against a SQL
database or an in-process store without code changes.
"""

import uuid
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from app.db.models import AdminAction, Template, TemplateStatus, User


@dataclass(frozen=True)
class TemplatePage:
    """One page of templates.

    Attributes:
        items: Templates on this page.
        total: Number of matching templates across all pages.
        page: 1-based page number.
        page_size: Maximum number of items per page.
    """

    items: list[Template]
    total: int
    page: int
    page_size: int


class BaseUserRepository(ABC):
    """Storage of marketplace accounts."""

    @abstractmethod
    async def get(self, user_id: uuid.UUID) -> User | None:
        """Return the user with the given id, or None."""
        pass

    @abstractmethod
    async def get_by_email(self, email: str) -> User | None:
        """Return the user registered with the given email, or None."""
        pass

    @abstractmethod
    async def add(self, user: User) -> User:
        """Persist a new user and return it."""
        pass


class BaseTemplateRepository(ABC):
    """Storage of templates and their moderation history.

    Example:
        ```python
        class SqlTemplateRepository(BaseTemplateRepository):
            async def get(self, template_id: uuid.UUID) -> Template | None:
                return await self._session.get(Template, template_id)
        ```
    """

    @abstractmethod
    async def get(self, template_id: uuid.UUID) -> Template | None:
        """Return the template with the given id, or None."""
        pass

    @abstractmethod
    async def add(self, template: Template) -> Template:
        """Persist a new template and return it."""
        pass

    @abstractmethod
    async def update_content(
        self,
        template_id: uuid.UUID,
        changes: Mapping[str, Any],
    ) -> Template | None:
        """Apply content changes to a template.

        Content updates never touch the publication status.

        Args:
            template_id: Template to update.
            changes: Attribute names and new values.

        Returns:
            The updated template, or None if it does not exist.
        """
        pass

    @abstractmethod
    async def list_by_status(
        self,
        status: TemplateStatus,
        page: int = 1,
        page_size: int = 20,
    ) -> TemplatePage:
        """List templates in a status, oldest first."""
        pass

    @abstractmethod
    async def transition_status(
        self,
        template_id: uuid.UUID,
        *,
        expected: TemplateStatus,
        target: TemplateStatus,
        changes: Mapping[str, Any],
        audit: AdminAction,
    ) -> Template | None:
        """Move a template from ``expected`` to ``target`` atomically.

        The status write is conditional on the current status being
        ``expected`` and is committed together with the audit row. If the
        condition does not hold nothing is written.

        Args:
            template_id: Template to transition.
            expected: Status the template must currently have.
            target: Status to write.
            changes: Additional attributes written with the status.
            audit: Audit row recorded in the same transaction.

        Returns:
            The updated template, or None if it does not exist or is not in
            the expected status.
        """
        pass
