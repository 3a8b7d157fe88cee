"""Core configuration, permissions and logging components."""

from app.core.config import Settings, get_settings
from app.core.permissions import AccessPolicy, Permission

__all__ = [
    "Settings",
    "get_settings",
    "AccessPolicy",
    "Permission",
]
