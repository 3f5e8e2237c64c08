"""S3-compatible blob store.

Works against AWS S3 or any S3-compatible endpoint (MinIO, Backblaze B2).
Access URLs are presigned GET URLs. boto3 is synchronous, so every call is
pushed to a worker thread.
"""

import asyncio
import logging
from typing import Any

import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError

from draftgen.core.exceptions import StorageError
from draftgen.interfaces.blob_store import BaseBlobStore
from draftgen.interfaces.template import DOCX_MIME_TYPE

logger = logging.getLogger(__name__)

# SigV4 presigned URLs are capped at seven days
MAX_PRESIGN_SECONDS = 7 * 24 * 60 * 60


class S3BlobStore(BaseBlobStore):
    """Stores blobs in an S3 bucket."""

    def __init__(
        self,
        bucket: str,
        endpoint_url: str | None = None,
        region: str | None = None,
        access_key_id: str | None = None,
        secret_access_key: str | None = None,
        client: Any = None,
    ) -> None:
        """Initialize the store.

        Args:
            bucket: Bucket holding every blob.
            endpoint_url: Optional S3-compatible endpoint.
            region: Optional region name.
            access_key_id: Optional access key; falls back to the boto3 chain.
            secret_access_key: Optional secret key.
            client: Pre-built boto3 S3 client, mainly for tests.
        """
        if not bucket:
            raise ValueError("S3_BUCKET is required for the s3 blob store")

        self._bucket = bucket
        self._client = client or boto3.client(
            "s3",
            endpoint_url=endpoint_url,
            region_name=region,
            aws_access_key_id=access_key_id,
            aws_secret_access_key=secret_access_key,
            config=Config(signature_version="s3v4"),
        )

    async def upload(
        self,
        path: str,
        data: bytes,
        ttl_minutes: int,
        content_type: str = DOCX_MIME_TYPE,
    ) -> str:
        try:
            await asyncio.to_thread(
                self._client.put_object,
                Bucket=self._bucket,
                Key=path,
                Body=data,
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Upload failed for s3://{self._bucket}/{path}: {e}", exc_info=True)
            raise StorageError("Failed to store document") from e

        logger.info(f"Uploaded s3://{self._bucket}/{path} ({len(data)} bytes)")
        return await self.get_signed_url(path, ttl_minutes)

    async def get_signed_url(self, path: str, ttl_minutes: int) -> str:
        expires_in = min(ttl_minutes * 60, MAX_PRESIGN_SECONDS)
        try:
            return await asyncio.to_thread(
                self._client.generate_presigned_url,
                "get_object",
                Params={"Bucket": self._bucket, "Key": path},
                ExpiresIn=expires_in,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Presigning failed for s3://{self._bucket}/{path}: {e}", exc_info=True)
            raise StorageError("Failed to sign download URL") from e

    async def download(self, path: str) -> bytes:
        def _read() -> bytes:
            response = self._client.get_object(Bucket=self._bucket, Key=path)
            return response["Body"].read()

        try:
            return await asyncio.to_thread(_read)
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Download failed for s3://{self._bucket}/{path}: {e}")
            raise StorageError(f"Blob not readable: {path}") from e
