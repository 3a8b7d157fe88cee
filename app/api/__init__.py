"""FastAPI routers and dependencies."""

from app.api.admin import router as admin_router
from app.api.deps import (
    get_current_user,
    get_db,
    get_template_repository,
    get_user_repository,
    require_permission,
)
from app.api.templates import router as templates_router
from app.api.users import router as users_router

__all__ = [
    "get_current_user",
    "get_db",
    "get_template_repository",
    "get_user_repository",
    "require_permission",
    "admin_router",
    "templates_router",
    "users_router",
]
