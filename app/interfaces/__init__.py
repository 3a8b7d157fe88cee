"""Abstract base classes and shared value types."""

from app.interfaces.repository import BaseTemplateRepository, BaseUserRepository, TemplatePage
from app.interfaces.template import (
    DataValidationError,
    FieldError,
    StateTransitionError,
    TemplateSource,
    TemplateStructureError,
)

__all__ = [
    "BaseTemplateRepository",
    "BaseUserRepository",
    "TemplatePage",
    "FieldError",
    "TemplateSource",
    "TemplateStructureError",
    "DataValidationError",
    "StateTransitionError",
]
