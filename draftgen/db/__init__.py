"""Database models and session management."""

from draftgen.db.models import (
    Draft,
    Template,
    User,
    UserPlan,
)
from draftgen.db.session import (
    AsyncSession,
    close_db,
    create_all_tables,
    get_session_maker,
)

__all__ = [
    # Models
    "User",
    "UserPlan",
    "Template",
    "Draft",
    # Session
    "AsyncSession",
    "get_session_maker",
    "create_all_tables",
    "close_db",
]
