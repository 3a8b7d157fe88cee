"""Concrete repository implementations."""

from app.strategies.repositories.memory import InMemoryTemplateRepository, InMemoryUserRepository
from app.strategies.repositories.sql import SqlTemplateRepository, SqlUserRepository

__all__ = [
    "InMemoryTemplateRepository",
    "InMemoryUserRepository",
    "SqlTemplateRepository",
    "SqlUserRepository",
]
