"""Abstract base class for blob storage strategies.

The Strategy Pattern allows generated documents to live on the local
filesystem or in an S3-compatible bucket interchangeably.
"""

from abc import ABC, abstractmethod

from draftgen.interfaces.template import DOCX_MIME_TYPE


class BaseBlobStore(ABC):
    """Abstract base class for blob storage.

    Paths are forward-slash separated keys such as
    ``drafts/<user_id>/<draft_id>.docx``. Access URLs are time-boxed.

    Example:
        ```python
        url = await store.upload("drafts/u1/d1.docx", content, ttl_minutes=1440)
        fresh = await store.get_signed_url("drafts/u1/d1.docx", ttl_minutes=1440)
        ```
    """

    @abstractmethod
    async def upload(
        self,
        path: str,
        data: bytes,
        ttl_minutes: int,
        content_type: str = DOCX_MIME_TYPE,
    ) -> str:
        """Store a blob and return a time-boxed access URL for it.

        Args:
            path: Destination key.
            data: Blob content.
            ttl_minutes: Validity window of the returned URL.
            content_type: MIME type recorded with the blob.

        Returns:
            An access URL valid for ``ttl_minutes``.

        Raises:
            StorageError: If the upload or URL signing fails.
        """

    @abstractmethod
    async def get_signed_url(self, path: str, ttl_minutes: int) -> str:
        """Issue a new time-boxed access URL for an existing blob.

        Raises:
            StorageError: If signing fails.
        """

    @abstractmethod
    async def download(self, path: str) -> bytes:
        """Read a blob.

        Raises:
            StorageError: If the blob is missing or cannot be read.
        """
