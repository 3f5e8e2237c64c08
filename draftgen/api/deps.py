"""FastAPI dependencies for dependency injection.

Provides reusable dependencies for routes including:
- Database sessions
- Caller identity from the bearer token
- Session-bound services
"""

import logging
from collections.abc import AsyncGenerator

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from draftgen.core.exceptions import AuthenticationError
from draftgen.core.factory import ComponentFactory
from draftgen.db.session import get_session_maker
from draftgen.interfaces.identity import Identity
from draftgen.services.draft_access import DraftAccessRefresher
from draftgen.services.draft_orchestrator import DraftOrchestrator

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


def get_factory(request: Request) -> ComponentFactory:
    """Return the component factory attached to the application."""
    return request.app.state.factory


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Dependency for getting async database sessions.

    Uncommitted work is rolled back if the request fails.

    Yields:
        An async database session.
    """
    session_maker = get_session_maker(request.app.state.settings)
    async with session_maker() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def get_identity(
    authorization: str | None = Header(default=None, description="Bearer token"),
    factory: ComponentFactory = Depends(get_factory),
) -> Identity:
    """Dependency for getting the verified caller.

    Args:
        authorization: The ``Authorization`` header.
        factory: Component factory.

    Returns:
        The caller's identity.

    Raises:
        AuthenticationError: If the header is missing or the token is invalid.
    """
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        logger.debug("Authorization header is missing or not a bearer token")
        raise AuthenticationError("Authentication required")

    token = authorization[len(BEARER_PREFIX):].strip()
    return factory.get_identity_provider().verify(token)


async def get_draft_orchestrator(
    session: AsyncSession = Depends(get_db),
    factory: ComponentFactory = Depends(get_factory),
) -> DraftOrchestrator:
    """Dependency for a draft orchestrator bound to the request session."""
    return factory.get_draft_orchestrator(session)


async def get_access_refresher(
    session: AsyncSession = Depends(get_db),
    factory: ComponentFactory = Depends(get_factory),
) -> DraftAccessRefresher:
    """Dependency for a draft access refresher bound to the request session."""
    return factory.get_access_refresher(session)
