"""User API routes."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from draftgen.api.deps import get_db, get_factory, get_identity
from draftgen.api.schemas import SubscriptionData, SubscriptionResponse
from draftgen.core.factory import ComponentFactory
from draftgen.interfaces.identity import Identity
from draftgen.interfaces.quota_store import start_of_next_month
from draftgen.services.draft_orchestrator import utcnow
from draftgen.strategies.stores import SQLQuotaStore, SQLUnitOfWork

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/user", tags=["user"])


@router.get("/subscription", response_model=SubscriptionResponse)
async def get_subscription(
    identity: Identity = Depends(get_identity),
    session: AsyncSession = Depends(get_db),
    factory: ComponentFactory = Depends(get_factory),
) -> SubscriptionResponse:
    """Return the caller's plan and usage for the current month.

    A first visit creates the user's quota record; a record from a previous
    month is reset before it is reported.
    """
    now = utcnow()
    quota = await SQLQuotaStore(session).get_or_create(identity, now)
    await SQLUnitOfWork(session).commit()

    return SubscriptionResponse(
        data=SubscriptionData(
            plan=quota.plan,
            drafts_used_this_month=quota.drafts_used_this_month,
            drafts_limit=factory.settings.draft_limit_for(quota.plan),
            current_period_end=start_of_next_month(now),
        )
    )
