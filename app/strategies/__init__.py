"""Concrete strategy implementations."""

from app.strategies.repositories import (
    InMemoryTemplateRepository,
    InMemoryUserRepository,
    SqlTemplateRepository,
    SqlUserRepository,
)

__all__ = [
    "InMemoryTemplateRepository",
    "InMemoryUserRepository",
    "SqlTemplateRepository",
    "SqlUserRepository",
]
