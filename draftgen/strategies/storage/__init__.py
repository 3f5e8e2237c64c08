"""Blob storage strategies."""

from draftgen.strategies.storage.local import LocalBlobStore
from draftgen.strategies.storage.s3 import S3BlobStore

__all__ = [
    "LocalBlobStore",
    "S3BlobStore",
]
