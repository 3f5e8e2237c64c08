"""Application services composed from strategies."""

from draftgen.services.draft_access import DraftAccessRefresher
from draftgen.services.draft_orchestrator import DraftCreated, DraftOrchestrator

__all__ = [
    "DraftAccessRefresher",
    "DraftCreated",
    "DraftOrchestrator",
]
