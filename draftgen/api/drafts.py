"""Draft API routes.

Creates drafts from templates and lists a caller's draft history.
"""

import logging
import math

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from draftgen.api.deps import (
    get_access_refresher,
    get_db,
    get_draft_orchestrator,
    get_identity,
)
from draftgen.api.schemas import (
    CreateDraftRequest,
    DraftCreatedData,
    DraftCreatedResponse,
    DraftHistoryResponse,
    DraftSummary,
    Pagination,
)
from draftgen.interfaces.identity import Identity
from draftgen.services.draft_access import DraftAccessRefresher
from draftgen.services.draft_orchestrator import DraftOrchestrator
from draftgen.strategies.stores import SQLDraftStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/drafts", tags=["drafts"])

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20
MAX_LIMIT = 100


@router.post("", response_model=DraftCreatedResponse, status_code=status.HTTP_200_OK)
async def create_draft(
    payload: CreateDraftRequest,
    identity: Identity = Depends(get_identity),
    orchestrator: DraftOrchestrator = Depends(get_draft_orchestrator),
) -> DraftCreatedResponse:
    """Generate a draft from a template.

    Args:
        payload: Template id and submitted values.
        identity: The verified caller.
        orchestrator: Draft orchestrator bound to the request session.

    Returns:
        The new draft's id, download URL and URL expiry.
    """
    logger.info(f"Draft requested by {identity.uid} from template {payload.template_id}")

    created = await orchestrator.create_draft(identity, payload.template_id, payload.variables)

    return DraftCreatedResponse(
        data=DraftCreatedData(
            draft_id=created.draft_id,
            download_url=created.download_url,
            expires_at=created.expires_at,
        )
    )


@router.get("/history", response_model=DraftHistoryResponse)
async def list_draft_history(
    page: int = Query(default=DEFAULT_PAGE, ge=1, description="1-based page number"),
    limit: int = Query(default=DEFAULT_LIMIT, ge=1, le=MAX_LIMIT, description="Page size"),
    identity: Identity = Depends(get_identity),
    session: AsyncSession = Depends(get_db),
    refresher: DraftAccessRefresher = Depends(get_access_refresher),
) -> DraftHistoryResponse:
    """List the caller's drafts, newest first.

    Lapsed download URLs are re-signed and saved before the page is built.
    """
    store = SQLDraftStore(session)
    offset = (page - 1) * limit

    drafts = await store.list_for_user(identity.uid, offset, limit)
    total = await store.count_for_user(identity.uid)
    drafts = await refresher.refresh(drafts)

    total_pages = 0 if total == 0 else math.ceil(total / limit)

    return DraftHistoryResponse(
        data=[DraftSummary.from_record(draft) for draft in drafts],
        pagination=Pagination(page=page, limit=limit, total=total, total_pages=total_pages),
    )
