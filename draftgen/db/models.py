"""Database models using SQLModel.

Defines the core data models for the draft-generation service:
- User: Identity-provider user plus monthly quota counters
- Template: Fillable document template and its variable schema
- Draft: One generated document and its access URL
"""

import datetime
import enum
from typing import Any

from sqlalchemy import JSON, Column, DateTime, ForeignKey, String
from sqlmodel import Field, SQLModel


def utcnow() -> datetime.datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.datetime.now(datetime.timezone.utc)


class UserPlan(str, enum.Enum):
    """Pricing plans. Monthly caps come from settings."""

    FREE = "free"
    PRO = "pro"
    UNLIMITED = "unlimited"


# =============================================================================
# Shared Models (for API responses, not database tables)
# =============================================================================


class UserBase(SQLModel):
    """Base user fields."""

    email: str = Field(default="", max_length=255)
    phone: str = Field(default="", max_length=32)
    display_name: str = Field(default="", max_length=255)
    plan: str = Field(default=UserPlan.FREE.value, max_length=32)


class TemplateBase(SQLModel):
    """Base template fields."""

    name: str = Field(min_length=1, max_length=255)
    slug: str = Field(default="", max_length=255, index=True)
    description: str = Field(default="", max_length=2048)
    category_id: str = Field(default="", max_length=64)
    category_name: str = Field(default="", max_length=255)
    is_active: bool = Field(default=True)


# =============================================================================
# Database Models
# =============================================================================


class User(UserBase, table=True):
    """User model keyed by the identity provider's uid.

    ``drafts_reset_date`` is the first instant of the month that
    ``drafts_used_this_month`` applies to.
    """

    __tablename__ = "users"

    id: str = Field(sa_column=Column(String(128), primary_key=True))
    drafts_used_this_month: int = Field(default=0, ge=0)
    drafts_reset_date: datetime.datetime = Field(
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    created_at: datetime.datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    last_login_at: datetime.datetime | None = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True)),
    )


class Template(TemplateBase, table=True):
    """Template model.

    The ``.docx`` binary lives in the blob store at ``templates/<id>.docx``.
    """

    __tablename__ = "templates"

    id: str = Field(sa_column=Column(String(128), primary_key=True))
    variables: list[dict[str, Any]] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False),
    )
    usage_count: int = Field(default=0, ge=0)
    created_at: datetime.datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )


class Draft(SQLModel, table=True):
    """Draft model.

    Template name and category are copied at creation time. Only
    ``generated_file_url`` and ``expires_at`` change afterwards.
    """

    __tablename__ = "drafts"

    id: str = Field(sa_column=Column(String(64), primary_key=True))
    user_id: str = Field(
        sa_column=Column(
            String(128),
            ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )
    )
    template_id: str = Field(max_length=128, index=True)
    template_name: str = Field(max_length=255)
    category_name: str = Field(default="", max_length=255)
    generated_file_url: str = Field(max_length=4096)
    storage_path: str = Field(max_length=1024)
    variables: dict[str, Any] = Field(
        default_factory=dict,
        sa_column=Column(JSON, nullable=False),
    )
    created_at: datetime.datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False, index=True),
    )
    expires_at: datetime.datetime | None = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True)),
    )
