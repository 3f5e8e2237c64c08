"""API request and response schemas.

Pydantic v2 models for API serialization/deserialization. Field names are
snake_case in Python and camelCase on the wire.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from draftgen.interfaces.draft_store import DraftRecord


class CamelModel(BaseModel):
    """Base model emitting and accepting camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# Draft Schemas
# =============================================================================


class CreateDraftRequest(CamelModel):
    """Request body for ``POST /drafts``."""

    template_id: str = Field(min_length=1, description="Template to fill")
    variables: dict[str, Any] = Field(
        default_factory=dict,
        description="Submitted values keyed by variable name",
    )


class DraftCreatedData(CamelModel):
    """Identifiers and access URL of a new draft."""

    draft_id: str
    download_url: str
    expires_at: datetime


class DraftCreatedResponse(CamelModel):
    """Response for ``POST /drafts``."""

    data: DraftCreatedData


class DraftSummary(CamelModel):
    """A draft as listed in history; submitted values are not included."""

    id: str
    user_id: str
    template_id: str
    template_name: str
    category_name: str
    generated_file_url: str
    created_at: datetime
    expires_at: datetime | None = None

    @classmethod
    def from_record(cls, record: DraftRecord) -> "DraftSummary":
        expires_at = record.expires_at if isinstance(record.expires_at, datetime) else None
        return cls(
            id=record.id,
            user_id=record.user_id,
            template_id=record.template_id,
            template_name=record.template_name,
            category_name=record.category_name,
            generated_file_url=record.generated_file_url,
            created_at=record.created_at,
            expires_at=expires_at,
        )


class Pagination(CamelModel):
    """Page position within a listing."""

    page: int
    limit: int
    total: int
    total_pages: int


class DraftHistoryResponse(CamelModel):
    """Response for ``GET /drafts/history``."""

    data: list[DraftSummary]
    pagination: Pagination


# =============================================================================
# User Schemas
# =============================================================================


class SubscriptionData(CamelModel):
    """The caller's plan and usage in the current period."""

    plan: str
    drafts_used_this_month: int
    drafts_limit: int | None = Field(description="Monthly cap; null when unlimited")
    current_period_end: datetime


class SubscriptionResponse(CamelModel):
    """Response for ``GET /user/subscription``."""

    data: SubscriptionData


# =============================================================================
# Error Schemas
# =============================================================================


class ErrorBody(BaseModel):
    """Machine-readable error."""

    code: str = Field(description="Stable error code")
    message: str = Field(description="Human-readable message")
    details: Any = Field(default=None, description="Optional structured payload")


class ErrorResponse(BaseModel):
    """Envelope for every error response."""

    error: ErrorBody
