"""SQL-backed stores sharing one ``AsyncSession``.

Stores only stage and flush; the unit of work owns commit and rollback so
a service can make several writes durable together.
"""

import logging
from datetime import datetime, timezone

from pydantic import ValidationError as SchemaError
from sqlalchemy import func, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from draftgen.core.exceptions import DocumentGenerationError, StorageError
from draftgen.db.models import Draft, Template, User, UserPlan
from draftgen.interfaces.blob_store import BaseBlobStore
from draftgen.interfaces.draft_store import BaseDraftStore, DraftRecord
from draftgen.interfaces.identity import Identity
from draftgen.interfaces.quota_store import BaseQuotaStore, QuotaState, start_of_month
from draftgen.interfaces.template import BaseTemplateStore, TemplateRecord
from draftgen.interfaces.unit_of_work import BaseUnitOfWork
from draftgen.strategies.template_engine.models import VariableDefinition

logger = logging.getLogger(__name__)


def as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes (SQLite drops the offset)."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def template_blob_path(template_id: str) -> str:
    """Return the blob key of a template's ``.docx`` binary."""
    return f"templates/{template_id}.docx"


# =============================================================================
# Unit of work
# =============================================================================


class SQLUnitOfWork(BaseUnitOfWork):
    """Commits or rolls back the shared session."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def commit(self) -> None:
        try:
            await self._session.commit()
        except SQLAlchemyError as e:
            logger.error(f"Commit failed: {e}", exc_info=True)
            await self._session.rollback()
            raise StorageError("Failed to save changes") from e

    async def rollback(self) -> None:
        await self._session.rollback()


# =============================================================================
# Templates
# =============================================================================


class SQLTemplateStore(BaseTemplateStore):
    """Template rows in SQL, binaries in the blob store."""

    def __init__(self, session: AsyncSession, blob_store: BaseBlobStore) -> None:
        self._session = session
        self._blob_store = blob_store

    async def get_template(self, template_id: str) -> TemplateRecord | None:
        try:
            template = await self._session.get(Template, template_id)
        except SQLAlchemyError as e:
            logger.error(f"Failed to load template {template_id}: {e}", exc_info=True)
            raise StorageError("Failed to load template") from e

        if template is None:
            return None

        try:
            variables = [VariableDefinition.model_validate(raw) for raw in template.variables]
        except SchemaError as e:
            logger.error(f"Template {template_id} has a malformed variable schema: {e}")
            raise DocumentGenerationError("Failed to load template") from e

        return TemplateRecord(
            id=template.id,
            name=template.name,
            category_name=template.category_name,
            variables=variables,
            is_active=template.is_active,
        )

    async def get_template_binary(self, template_id: str) -> bytes:
        return await self._blob_store.download(template_blob_path(template_id))

    async def increment_usage(self, template_id: str) -> None:
        try:
            await self._session.execute(
                update(Template)
                .where(Template.id == template_id)
                .values(usage_count=Template.usage_count + 1)
            )
        except SQLAlchemyError as e:
            raise StorageError("Failed to record template usage") from e


# =============================================================================
# Drafts
# =============================================================================


def _to_record(draft: Draft) -> DraftRecord:
    return DraftRecord(
        id=draft.id,
        user_id=draft.user_id,
        template_id=draft.template_id,
        template_name=draft.template_name,
        category_name=draft.category_name,
        generated_file_url=draft.generated_file_url,
        storage_path=draft.storage_path,
        created_at=as_utc(draft.created_at),
        expires_at=as_utc(draft.expires_at),
        variables=dict(draft.variables or {}),
    )


class SQLDraftStore(BaseDraftStore):
    """Draft rows in SQL."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, draft: DraftRecord) -> None:
        expires_at = draft.expires_at if isinstance(draft.expires_at, datetime) else None
        self._session.add(
            Draft(
                id=draft.id,
                user_id=draft.user_id,
                template_id=draft.template_id,
                template_name=draft.template_name,
                category_name=draft.category_name,
                generated_file_url=draft.generated_file_url,
                storage_path=draft.storage_path,
                variables=draft.variables,
                created_at=draft.created_at,
                expires_at=expires_at,
            )
        )
        try:
            await self._session.flush()
        except SQLAlchemyError as e:
            logger.error(f"Failed to stage draft {draft.id}: {e}", exc_info=True)
            raise StorageError("Failed to save draft") from e

    async def list_for_user(self, user_id: str, offset: int, limit: int) -> list[DraftRecord]:
        statement = (
            select(Draft)
            .where(Draft.user_id == user_id)
            .order_by(Draft.created_at.desc(), Draft.id.desc())
            .offset(offset)
            .limit(limit)
        )
        try:
            result = await self._session.execute(statement)
        except SQLAlchemyError as e:
            logger.error(f"Failed to list drafts for {user_id}: {e}", exc_info=True)
            raise StorageError("Failed to load drafts") from e
        return [_to_record(draft) for draft in result.scalars().all()]

    async def count_for_user(self, user_id: str) -> int:
        statement = select(func.count()).select_from(Draft).where(Draft.user_id == user_id)
        try:
            result = await self._session.execute(statement)
        except SQLAlchemyError as e:
            raise StorageError("Failed to count drafts") from e
        return int(result.scalar_one())

    async def update_access(self, draft_id: str, url: str, expires_at: datetime) -> None:
        try:
            await self._session.execute(
                update(Draft)
                .where(Draft.id == draft_id)
                .values(generated_file_url=url, expires_at=expires_at)
            )
        except SQLAlchemyError as e:
            logger.error(f"Failed to update access for draft {draft_id}: {e}", exc_info=True)
            raise StorageError("Failed to update draft") from e


# =============================================================================
# Quota ledger
# =============================================================================


class SQLQuotaStore(BaseQuotaStore):
    """Monthly draft counters on the ``users`` table.

    The increment is one conditional ``UPDATE``, so the database serializes
    concurrent requests on the user's row.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    def _insert_ignoring_conflict(self, values: dict):
        match self._session.bind.dialect.name:
            case "postgresql":
                return pg_insert(User.__table__).values(**values).on_conflict_do_nothing(index_elements=["id"])
            case "sqlite":
                return sqlite_insert(User.__table__).values(**values).on_conflict_do_nothing(index_elements=["id"])
            case dialect:
                raise StorageError(f"Unsupported database dialect: {dialect}")

    async def _load(self, user_id: str) -> User | None:
        statement = (
            select(User)
            .where(User.id == user_id)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(statement)
        return result.scalar_one_or_none()

    async def get_or_create(self, identity: Identity, now: datetime) -> QuotaState:
        period_start = start_of_month(now)
        try:
            await self._session.execute(
                self._insert_ignoring_conflict(
                    {
                        "id": identity.uid,
                        "email": identity.email,
                        "phone": identity.phone_number,
                        "display_name": identity.display_name,
                        "plan": UserPlan.FREE.value,
                        "drafts_used_this_month": 0,
                        "drafts_reset_date": period_start,
                        "created_at": now,
                        "last_login_at": now,
                    }
                )
            )

            user = await self._load(identity.uid)
            if user is None:
                raise StorageError(f"User {identity.uid} vanished after upsert")

            if as_utc(user.drafts_reset_date) < period_start:
                logger.info(
                    f"Resetting monthly drafts for {identity.uid} "
                    f"(was {user.drafts_used_this_month} since {user.drafts_reset_date})"
                )
                await self._session.execute(
                    update(User)
                    .where(User.id == identity.uid, User.drafts_reset_date < period_start)
                    .values(drafts_used_this_month=0, drafts_reset_date=period_start)
                )
                user = await self._load(identity.uid)

        except SQLAlchemyError as e:
            logger.error(f"Failed to load quota for {identity.uid}: {e}", exc_info=True)
            raise StorageError("Failed to load user quota") from e

        return QuotaState(
            user_id=user.id,
            plan=user.plan,
            drafts_used_this_month=user.drafts_used_this_month,
            drafts_reset_date=as_utc(user.drafts_reset_date),
        )

    async def atomic_increment_if_below_limit(
        self, user_id: str, limit: int | None
    ) -> tuple[bool, int]:
        statement = update(User).where(User.id == user_id)
        if limit is not None:
            statement = statement.where(User.drafts_used_this_month < limit)
        statement = statement.values(
            drafts_used_this_month=User.drafts_used_this_month + 1
        ).execution_options(synchronize_session=False)

        try:
            result = await self._session.execute(statement)
            count = await self._session.scalar(
                select(User.drafts_used_this_month).where(User.id == user_id)
            )
        except SQLAlchemyError as e:
            logger.error(f"Quota increment failed for {user_id}: {e}", exc_info=True)
            raise StorageError("Failed to update user quota") from e

        return result.rowcount == 1, int(count or 0)

    async def reset_expired(self, period_start: datetime) -> int:
        try:
            result = await self._session.execute(
                update(User)
                .where(User.drafts_reset_date < period_start)
                .values(drafts_used_this_month=0, drafts_reset_date=period_start)
                .execution_options(synchronize_session=False)
            )
        except SQLAlchemyError as e:
            logger.error(f"Monthly quota reset failed: {e}", exc_info=True)
            raise StorageError("Failed to reset quotas") from e
        return result.rowcount
