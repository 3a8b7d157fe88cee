"""Database models using SQLModel.

Defines the core data models for the template marketplace:
- User: Authenticated accounts with a marketplace role
- Template: Fill-in document templates and their publication status
- AdminAction: Audit trail of moderation decisions
"""

import datetime
import enum
import uuid
from decimal import Decimal
from typing import Any

from pydantic import EmailStr
from sqlalchemy import Column, DateTime, ForeignKey, Numeric, text
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlmodel import Field, Relationship, SQLModel


class UserRole(str, enum.Enum):
    """Marketplace roles. Permissions per role live in AccessPolicy."""

    USER = "user"
    CREATOR = "creator"
    ADMIN = "admin"


class TemplateStatus(str, enum.Enum):
    """Publication status of a template.

    Templates start pending and an admin decision moves them to one of the
    two terminal states:

    PENDING -> PUBLISHED
       |
       v
    REJECTED
    """

    PENDING = "pending"
    PUBLISHED = "published"
    REJECTED = "rejected"


class AdminActionType(str, enum.Enum):
    """Audited moderation actions."""

    APPROVE_TEMPLATE = "approve_template"
    REJECT_TEMPLATE = "reject_template"


# =============================================================================
# Shared Models (for API responses, not database tables)
# =============================================================================


class UserBase(SQLModel):
    """Base user fields."""

    email: EmailStr = Field(unique=True, index=True, max_length=255)
    full_name: str | None = Field(default=None, max_length=255)
    role: UserRole = Field(default=UserRole.USER)
    is_active: bool = Field(default=True)


class TemplateBase(SQLModel):
    """Base template fields."""

    title: str = Field(min_length=1, max_length=255)
    description: str = Field(default="", max_length=2000)
    body: str
    currency: str = Field(default="TRY", max_length=3)


# =============================================================================
# Database Models
# =============================================================================


class User(UserBase, table=True):
    """User model representing authenticated accounts.

    Creators author templates; admins moderate them.
    """

    __tablename__ = "users"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        sa_column=Column(UUID(as_uuid=True), primary_key=True),
    )
    hashed_password: str = Field(max_length=255, exclude=True)
    created_at: datetime.datetime = Field(
        default_factory=datetime.datetime.utcnow,
        sa_column=Column(DateTime(timezone=True), server_default=text("NOW()")),
    )
    updated_at: datetime.datetime = Field(
        default_factory=datetime.datetime.utcnow,
        sa_column=Column(
            DateTime(timezone=True),
            server_default=text("NOW()"),
            onupdate=text("NOW()"),
        ),
    )

    # Relationships
    templates: list["Template"] = Relationship(back_populates="creator")


class Template(TemplateBase, table=True):
    """Template model.

    ``placeholders`` holds the raw placeholder schema as JSON; it is only
    written after passing structure validation.
    """

    __tablename__ = "templates"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        sa_column=Column(UUID(as_uuid=True), primary_key=True),
    )
    created_by: uuid.UUID = Field(
        sa_column=Column(
            UUID(as_uuid=True),
            ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )
    )
    placeholders: dict[str, Any] = Field(
        default_factory=dict,
        sa_column=Column(JSONB, nullable=False),
    )
    price: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(10, 2), nullable=False, server_default=text("0")),
    )
    status: TemplateStatus = Field(default=TemplateStatus.PENDING, index=True)
    rejection_reason: str | None = Field(default=None, max_length=500)
    is_verified: bool = Field(default=False)
    is_featured: bool = Field(default=False)
    rating: float = Field(default=0.0, ge=0)
    total_ratings: int = Field(default=0, ge=0)
    download_count: int = Field(default=0, ge=0)
    purchase_count: int = Field(default=0, ge=0)
    version: str = Field(default="1.0", max_length=20)
    created_at: datetime.datetime = Field(
        default_factory=datetime.datetime.utcnow,
        sa_column=Column(DateTime(timezone=True), server_default=text("NOW()")),
    )
    updated_at: datetime.datetime = Field(
        default_factory=datetime.datetime.utcnow,
        sa_column=Column(
            DateTime(timezone=True),
            server_default=text("NOW()"),
            onupdate=text("NOW()"),
        ),
    )

    # Relationships
    creator: User = Relationship(back_populates="templates")


class AdminAction(SQLModel, table=True):
    """Audit row written in the same transaction as a moderation decision."""

    __tablename__ = "admin_actions"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        sa_column=Column(UUID(as_uuid=True), primary_key=True),
    )
    admin_id: uuid.UUID | None = Field(
        sa_column=Column(
            UUID(as_uuid=True),
            ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
            index=True,
        )
    )
    action_type: AdminActionType
    target_type: str = Field(default="template", max_length=50)
    target_id: uuid.UUID = Field(
        sa_column=Column(UUID(as_uuid=True), nullable=False, index=True),
    )
    details: dict[str, Any] | None = Field(
        default=None,
        sa_column=Column(JSONB),
    )
    created_at: datetime.datetime = Field(
        default_factory=datetime.datetime.utcnow,
        sa_column=Column(DateTime(timezone=True), server_default=text("NOW()")),
    )


# =============================================================================
# Response Models
# =============================================================================


class UserRead(UserBase):
    """User response model."""

    id: uuid.UUID
    created_at: datetime.datetime
    updated_at: datetime.datetime


class TemplateRead(TemplateBase):
    """Template response model."""

    id: uuid.UUID
    created_by: uuid.UUID
    placeholders: dict[str, Any]
    price: Decimal
    status: TemplateStatus
    rejection_reason: str | None = None
    is_verified: bool
    is_featured: bool
    rating: float
    total_ratings: int
    download_count: int
    purchase_count: int
    version: str
    created_at: datetime.datetime
    updated_at: datetime.datetime
