"""FastAPI routers and dependencies."""

from draftgen.api.deps import (
    get_access_refresher,
    get_db,
    get_draft_orchestrator,
    get_factory,
    get_identity,
)
from draftgen.api.drafts import router as drafts_router
from draftgen.api.files import router as files_router
from draftgen.api.users import router as users_router

__all__ = [
    "get_access_refresher",
    "get_db",
    "get_draft_orchestrator",
    "get_factory",
    "get_identity",
    "drafts_router",
    "files_router",
    "users_router",
]
