"""Template schema and rendering interfaces.

Defines the shared value types and exceptions of the template engine.
Validators never raise; they return tuples of FieldError that callers
concatenate. Exceptions are raised only at the outer boundaries.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Protocol


@dataclass(frozen=True)
class FieldError:
    """A single problem attributed to a field.

    Attributes:
        field: Placeholder key (or body token) the problem belongs to.
        message: Human-readable description.
    """

    field: str
    message: str

    def to_dict(self) -> dict[str, str]:
        """Serialize for API responses."""
        return {"field": self.field, "message": self.message}


class TemplateSource(Protocol):
    """Anything with the attributes the engine reads from a template."""

    id: Any
    title: str
    body: str
    placeholders: Mapping[str, Any]


class _FieldErrorsMixin:
    errors: tuple[FieldError, ...]

    def errors_as_dicts(self) -> list[dict[str, str]]:
        """Serialize every field error for API responses."""
        return [error.to_dict() for error in self.errors]


class TemplateStructureError(_FieldErrorsMixin, Exception):
    """Raised when a template body and its placeholder schema disagree."""

    def __init__(self, errors: Iterable[FieldError], prefix: str = "Template validation failed") -> None:
        self.errors = tuple(errors)
        super().__init__(f"{prefix}: {', '.join(e.message for e in self.errors)}")


class DataValidationError(_FieldErrorsMixin, Exception):
    """Raised once by the injection pipeline when submitted values are invalid."""

    def __init__(self, errors: Iterable[FieldError]) -> None:
        self.errors = tuple(errors)
        super().__init__(
            f"User data validation failed: {', '.join(e.message for e in self.errors)}"
        )


class StateTransitionError(Exception):
    """Raised when a publication transition is not allowed.

    Carries a single reason string and no field attribution.
    """

    def __init__(self, message: str, *, reason: str = "invalid_state") -> None:
        self.reason = reason
        super().__init__(message)
