"""Database models and session management."""

from app.db.models import (
    AdminAction,
    AdminActionType,
    Template,
    TemplateStatus,
    User,
    UserRole,
)
from app.db.session import (
    AsyncSession,
    create_all_tables,
    get_async_session,
    init_db,
)

__all__ = [
    # Models
    "User",
    "UserRole",
    "Template",
    "TemplateStatus",
    "AdminAction",
    "AdminActionType",
    # Session
    "AsyncSession",
    "get_async_session",
    "create_all_tables",
    "init_db",
]
