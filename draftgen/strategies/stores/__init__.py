"""SQL-backed store strategies."""

from draftgen.strategies.stores.sql import (
    SQLDraftStore,
    SQLQuotaStore,
    SQLTemplateStore,
    SQLUnitOfWork,
    template_blob_path,
)

__all__ = [
    "SQLDraftStore",
    "SQLQuotaStore",
    "SQLTemplateStore",
    "SQLUnitOfWork",
    "template_blob_path",
]
