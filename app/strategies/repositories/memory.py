"""In-memory repository implementation.

Used for tests and local development without a database. State lives in
the repository instance; transitions are a compare-and-swap under a lock.
"""

import datetime
import logging
import threading
import uuid
from collections.abc import Mapping
from typing import Any

from app.db.models import AdminAction, Template, TemplateStatus, User
from app.interfaces.repository import BaseTemplateRepository, BaseUserRepository, TemplatePage

logger = logging.getLogger(__name__)


class InMemoryUserRepository(BaseUserRepository):
    """User storage in a dict keyed by id."""

    def __init__(self) -> None:
        self._users: dict[uuid.UUID, User] = {}
        self._lock = threading.Lock()

    async def get(self, user_id: uuid.UUID) -> User | None:
        return self._users.get(user_id)

    async def get_by_email(self, email: str) -> User | None:
        return next((user for user in self._users.values() if user.email == email), None)

    async def add(self, user: User) -> User:
        with self._lock:
            self._users[user.id] = user
        return user


class InMemoryTemplateRepository(BaseTemplateRepository):
    """Template storage in a dict keyed by id.

    Attributes:
        audit_log: Audit rows recorded by successful transitions, in order.
    """

    def __init__(self) -> None:
        self._templates: dict[uuid.UUID, Template] = {}
        self._lock = threading.Lock()
        self.audit_log: list[AdminAction] = []

    async def get(self, template_id: uuid.UUID) -> Template | None:
        return self._templates.get(template_id)

    async def add(self, template: Template) -> Template:
        with self._lock:
            self._templates[template.id] = template
        logger.info(f"Stored template {template.id}")
        return template

    async def update_content(
        self,
        template_id: uuid.UUID,
        changes: Mapping[str, Any],
    ) -> Template | None:
        with self._lock:
            template = self._templates.get(template_id)
            if template is None:
                return None
            for name, value in changes.items():
                setattr(template, name, value)
            template.updated_at = datetime.datetime.utcnow()
        return template

    async def list_by_status(
        self,
        status: TemplateStatus,
        page: int = 1,
        page_size: int = 20,
    ) -> TemplatePage:
        matching = sorted(
            (t for t in self._templates.values() if t.status == status),
            key=lambda t: t.created_at,
        )
        start = (page - 1) * page_size
        return TemplatePage(
            items=matching[start : start + page_size],
            total=len(matching),
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
        with self._lock:
            template = self._templates.get(template_id)
            if template is None or template.status != expected:
                return None

            template.status = target
            for name, value in changes.items():
                setattr(template, name, value)
            template.updated_at = datetime.datetime.utcnow()
            self.audit_log.append(audit)

        return template
