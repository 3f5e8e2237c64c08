"""Keeps draft access URLs usable on read paths."""

import asyncio
import logging
from collections.abc import Callable, Sequence
from dataclasses import replace
from datetime import datetime, timedelta, timezone

from draftgen.interfaces.blob_store import BaseBlobStore
from draftgen.interfaces.draft_store import BaseDraftStore, DraftRecord
from draftgen.interfaces.unit_of_work import BaseUnitOfWork

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def is_expired(expires_at: datetime | str | None, now: datetime) -> bool:
    """Return whether an access window has lapsed.

    Missing or unparsable expiries count as expired. Naive values are UTC.
    """
    if isinstance(expires_at, str):
        try:
            expires_at = datetime.fromisoformat(expires_at.strip())
        except ValueError:
            return True
    if not isinstance(expires_at, datetime):
        return True
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    return expires_at <= now


class DraftAccessRefresher:
    """Re-signs expired draft URLs without regenerating documents.

    Refreshing never touches the quota ledger.
    """

    def __init__(
        self,
        blob_store: BaseBlobStore,
        draft_store: BaseDraftStore,
        unit_of_work: BaseUnitOfWork,
        ttl_minutes: int,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._blob_store = blob_store
        self._draft_store = draft_store
        self._uow = unit_of_work
        self._ttl_minutes = ttl_minutes
        self._clock = clock

    async def refresh(
        self,
        drafts: Sequence[DraftRecord],
        now: datetime | None = None,
    ) -> list[DraftRecord]:
        """Return ``drafts`` with every lapsed access URL replaced.

        New URLs and expiries are persisted before returning. Order is kept.

        Args:
            drafts: Drafts about to be shown to their owner.
            now: Reference time; defaults to the injected clock.

        Returns:
            The drafts, refreshed where needed.

        Raises:
            StorageError: If signing or persisting a new URL fails.
        """
        now = now or self._clock()
        stale = [index for index, draft in enumerate(drafts) if is_expired(draft.expires_at, now)]
        if not stale:
            return list(drafts)

        # Updates share one session, so only the signing runs concurrently
        urls = await asyncio.gather(
            *(
                self._blob_store.get_signed_url(drafts[index].storage_path, self._ttl_minutes)
                for index in stale
            )
        )

        expires_at = now + timedelta(minutes=self._ttl_minutes)
        refreshed = list(drafts)
        for index, url in zip(stale, urls):
            await self._draft_store.update_access(drafts[index].id, url, expires_at)
            refreshed[index] = replace(drafts[index], generated_file_url=url, expires_at=expires_at)

        await self._uow.commit()
        logger.info(f"Refreshed access URLs for {len(stale)} draft(s)")
        return refreshed
