"""Abstract base classes for the draft-generation collaborators."""

from draftgen.interfaces.blob_store import BaseBlobStore
from draftgen.interfaces.draft_store import BaseDraftStore, DraftRecord
from draftgen.interfaces.identity import BaseIdentityProvider, Identity
from draftgen.interfaces.quota_store import BaseQuotaStore, QuotaState
from draftgen.interfaces.template import (
    BaseDocumentRenderer,
    BaseTemplateStore,
    GeneratedDocument,
    TemplateRecord,
)
from draftgen.interfaces.unit_of_work import BaseUnitOfWork

__all__ = [
    "BaseBlobStore",
    "BaseDocumentRenderer",
    "BaseDraftStore",
    "BaseIdentityProvider",
    "BaseQuotaStore",
    "BaseTemplateStore",
    "BaseUnitOfWork",
    "DraftRecord",
    "GeneratedDocument",
    "Identity",
    "QuotaState",
    "TemplateRecord",
]
