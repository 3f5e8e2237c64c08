"""Draft generation service.

Runs one "fill this template" request end to end: quota check, template
lookup, validation, merge, upload and bookkeeping. Quota is consumed only
when every step succeeds.
"""

import asyncio
import uuid
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Any

import structlog

from draftgen.core.config import Settings
from draftgen.core.exceptions import (
    NotFoundError,
    QuotaExceededError,
    StorageError,
    ValidationError,
)
from draftgen.interfaces.blob_store import BaseBlobStore
from draftgen.interfaces.draft_store import BaseDraftStore, DraftRecord
from draftgen.interfaces.identity import Identity
from draftgen.interfaces.quota_store import BaseQuotaStore
from draftgen.interfaces.template import BaseDocumentRenderer, BaseTemplateStore
from draftgen.interfaces.unit_of_work import BaseUnitOfWork
from draftgen.strategies.validation.variable_validator import validate_variables

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class DraftCreated:
    """Result of a successful generation."""

    draft_id: str
    download_url: str
    expires_at: datetime


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_draft_id(now: datetime) -> str:
    """Return ``<epoch-millis>-<8 hex chars>``."""
    return f"{int(now.timestamp() * 1000)}-{uuid.uuid4().hex[:8]}"


def draft_blob_path(user_id: str, draft_id: str) -> str:
    """Return the blob key of a generated draft."""
    return f"drafts/{user_id}/{draft_id}.docx"


def to_storable(values: Mapping[str, Any]) -> dict[str, Any]:
    """Make sanitized values JSON-serializable (dates become ISO strings)."""
    storable: dict[str, Any] = {}
    for name, value in values.items():
        if isinstance(value, (datetime, date)):
            storable[name] = value.isoformat()
        elif isinstance(value, tuple):
            storable[name] = list(value)
        else:
            storable[name] = value
    return storable


class DraftOrchestrator:
    """Creates drafts for verified callers.

    Example:
        ```python
        orchestrator = factory.get_draft_orchestrator(session)
        created = await orchestrator.create_draft(identity, "rent-agreement", values)
        ```
    """

    def __init__(
        self,
        template_store: BaseTemplateStore,
        blob_store: BaseBlobStore,
        quota_store: BaseQuotaStore,
        draft_store: BaseDraftStore,
        unit_of_work: BaseUnitOfWork,
        renderer: BaseDocumentRenderer,
        settings: Settings,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._template_store = template_store
        self._blob_store = blob_store
        self._quota_store = quota_store
        self._draft_store = draft_store
        self._uow = unit_of_work
        self._renderer = renderer
        self._settings = settings
        self._clock = clock

    async def create_draft(
        self,
        identity: Identity,
        template_id: str,
        raw_variables: Mapping[str, Any] | None,
    ) -> DraftCreated:
        """Generate a draft from a template and the caller's values.

        Args:
            identity: The verified caller.
            template_id: Template to fill.
            raw_variables: Untrusted submitted values keyed by variable name.

        Returns:
            The new draft's id, access URL and URL expiry.

        Raises:
            QuotaExceededError: The caller's monthly cap is reached, either
                before generation or by a concurrent request.
            NotFoundError: The template is missing or inactive.
            ValidationError: The submitted values are invalid.
            DocumentGenerationError: The template could not be merged.
            StorageError: A blob or record write failed.
        """
        now = self._clock()
        log = logger.bind(user_id=identity.uid, template_id=template_id)

        quota = await self._quota_store.get_or_create(identity, now)
        await self._uow.commit()

        limit = self._settings.draft_limit_for(quota.plan)
        if limit is not None and quota.drafts_used_this_month >= limit:
            log.info("draft_limit_reached", used=quota.drafts_used_this_month, limit=limit)
            raise QuotaExceededError(quota.drafts_used_this_month, limit)

        template = await self._template_store.get_template(template_id)
        if template is None or not template.is_active:
            raise NotFoundError("Template not found")

        result = validate_variables(template.variables, raw_variables)
        if not result.valid:
            log.info("draft_validation_failed", error_count=len(result.errors))
            raise ValidationError(result.error_dicts())

        binary = await self._template_store.get_template_binary(template.id)
        document = await asyncio.to_thread(
            self._renderer.generate, binary, result.sanitized, template.variables
        )

        draft_id = new_draft_id(now)
        storage_path = draft_blob_path(identity.uid, draft_id)
        ttl_minutes = self._settings.draft_url_ttl_minutes
        download_url = await self._blob_store.upload(storage_path, document.content, ttl_minutes)
        expires_at = now + timedelta(minutes=ttl_minutes)

        log = log.bind(draft_id=draft_id)
        try:
            await self._draft_store.create(
                DraftRecord(
                    id=draft_id,
                    user_id=identity.uid,
                    template_id=template.id,
                    template_name=template.name,
                    category_name=template.category_name,
                    generated_file_url=download_url,
                    storage_path=storage_path,
                    created_at=now,
                    expires_at=expires_at,
                    variables=to_storable(result.sanitized),
                )
            )

            ok, count = await self._quota_store.atomic_increment_if_below_limit(identity.uid, limit)
            if not ok:
                if limit is None:
                    raise StorageError(f"Quota record missing for {identity.uid}")
                log.info("draft_limit_reached_concurrently", used=count, limit=limit)
                raise QuotaExceededError(count, limit)

            await self._template_store.increment_usage(template.id)
            await self._uow.commit()
        except Exception:
            await self._uow.rollback()
            log.warning("orphaned_draft_blob", storage_path=storage_path)
            raise

        log.info(
            "draft_created",
            variable_count=document.metadata.variable_count,
            drafts_used=count,
        )

        return DraftCreated(draft_id=draft_id, download_url=download_url, expires_at=expires_at)
