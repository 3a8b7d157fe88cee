"""API request and response schemas.

Pydantic v2 models for API serialization/deserialization.
"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from app.db.models import TemplateRead, UserRole
from app.interfaces.template import FieldError
from app.strategies.moderation.review import MAX_PRICE, MIN_PAID_PRICE, is_valid_price


def _check_price(v: Decimal | None) -> Decimal | None:
    if v is not None and not is_valid_price(v):
        raise ValueError(
            f"Price must be 0 (free) or between {MIN_PAID_PRICE} and {MAX_PRICE}"
        )
    return v


# =============================================================================
# User Schemas
# =============================================================================


class UserCreate(BaseModel):
    """Request schema for creating a user."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "email": "creator@example.com",
                "full_name": "Ayşe Yılmaz",
                "password": "securepassword123",
                "role": "creator",
            }
        }
    )

    email: EmailStr = Field(description="User email address")
    full_name: str = Field(
        min_length=1, max_length=255, description="User's full name"
    )
    password: str = Field(
        min_length=8, max_length=100, description="User password (will be hashed)"
    )
    role: UserRole = Field(default=UserRole.USER, description="Marketplace role")

    @field_validator("role")
    @classmethod
    def validate_role(cls, v: UserRole) -> UserRole:
        """Admin accounts cannot be self-registered."""
        if v == UserRole.ADMIN:
            raise ValueError("Role must be 'user' or 'creator'")
        return v


class UserResponse(BaseModel):
    """Response schema for user."""

    id: uuid.UUID
    email: str
    full_name: str | None
    role: UserRole
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


# =============================================================================
# Error Schemas
# =============================================================================


class ErrorResponse(BaseModel):
    """Standard error response."""

    detail: str = Field(description="Error message")
    error_code: str | None = Field(default=None, description="Application-specific error code")
    errors: list[FieldError] | None = Field(
        default=None, description="Per-field problems for validation failures"
    )


# =============================================================================
# Template Schemas
# =============================================================================


class TemplateCreate(BaseModel):
    """Request schema for creating a template."""

    title: str = Field(min_length=1, max_length=255)
    description: str = Field(default="", max_length=2000)
    body: str = Field(min_length=1, description="Text with {identifier} placeholder tokens")
    placeholders: dict[str, Any] = Field(
        default_factory=dict, description="Placeholder name to configuration"
    )
    price: Decimal = Field(default=Decimal("0"), description="0 for free templates")
    currency: str | None = Field(default=None, min_length=3, max_length=3)

    @field_validator("price")
    @classmethod
    def validate_price(cls, v: Decimal) -> Decimal:
        return _check_price(v)


class TemplateUpdate(BaseModel):
    """Request schema for updating template content. Omitted fields are kept."""

    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=2000)
    body: str | None = Field(default=None, min_length=1)
    placeholders: dict[str, Any] | None = None
    price: Decimal | None = None
    currency: str | None = Field(default=None, min_length=3, max_length=3)

    @field_validator("price")
    @classmethod
    def validate_price(cls, v: Decimal | None) -> Decimal | None:
        return _check_price(v)


class TemplateListResponse(BaseModel):
    """Response for listing templates."""

    templates: list[TemplateRead]
    total: int
    page: int = 1
    page_size: int = 20


class StructureValidationResponse(BaseModel):
    """Result of re-validating a stored template's structure."""

    template_id: uuid.UUID
    is_valid: bool
    errors: list[FieldError] = Field(default_factory=list)


class ProcessRequest(BaseModel):
    """Submitted values for rendering a template."""

    user_data: dict[str, Any] = Field(
        default_factory=dict, description="Placeholder name to submitted value"
    )


# =============================================================================
# Moderation Schemas
# =============================================================================


class ApproveRequest(BaseModel):
    """Admin decision to publish a template."""

    is_verified: bool = False
    is_featured: bool = False


class RejectRequest(BaseModel):
    """Admin decision to reject a template."""

    reason: str = Field(description="Shown to the creator; 10 to 500 characters")
