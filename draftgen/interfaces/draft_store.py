"""Draft record storage interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class DraftRecord:
    """One generated document and its access metadata.

    Attributes:
        id: Draft identifier (timestamp prefix plus random suffix).
        user_id: Owner.
        template_id: Source template.
        template_name: Template name at creation time.
        category_name: Category name at creation time.
        generated_file_url: Current time-boxed access URL.
        storage_path: Blob key of the generated document.
        variables: Sanitized values used to build the document.
        created_at: Creation time.
        expires_at: End of ``generated_file_url``'s validity window. May be
            None or a string for records written by older clients.
    """

    id: str
    user_id: str
    template_id: str
    template_name: str
    category_name: str
    generated_file_url: str
    storage_path: str
    created_at: datetime
    expires_at: datetime | str | None
    variables: dict[str, Any] = field(default_factory=dict)


class BaseDraftStore(ABC):
    """Abstract base class for draft persistence.

    Writes are staged on the caller's unit of work.
    """

    @abstractmethod
    async def create(self, draft: DraftRecord) -> None:
        """Stage a new draft record."""

    @abstractmethod
    async def list_for_user(self, user_id: str, offset: int, limit: int) -> list[DraftRecord]:
        """Return one page of a user's drafts, newest first."""

    @abstractmethod
    async def count_for_user(self, user_id: str) -> int:
        """Return how many drafts a user has."""

    @abstractmethod
    async def update_access(self, draft_id: str, url: str, expires_at: datetime) -> None:
        """Stage a new access URL and expiry for an existing draft."""
