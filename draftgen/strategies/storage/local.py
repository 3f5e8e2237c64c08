"""Local filesystem blob store.

Blobs live under a root directory. Access URLs point at the service's own
``/files/{path}`` route and carry a short-lived HS256 token, so a download
link stops working once its window has passed.
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from urllib.parse import quote

import jwt

from draftgen.core.exceptions import StorageError
from draftgen.interfaces.blob_store import BaseBlobStore
from draftgen.interfaces.template import DOCX_MIME_TYPE

logger = logging.getLogger(__name__)

TOKEN_TYPE = "blob_access"
TOKEN_ALGORITHM = "HS256"


class LocalBlobStore(BaseBlobStore):
    """Stores blobs on disk and signs download URLs with PyJWT.

    Example:
        ```python
        store = LocalBlobStore(Path("./storage"), "http://localhost:8000", "secret")
        url = await store.upload("drafts/u1/d1.docx", content, ttl_minutes=60)
        ```
    """

    def __init__(self, root: Path, public_base_url: str, signing_secret: str) -> None:
        """Initialize the store.

        Args:
            root: Directory that holds every blob.
            public_base_url: Base URL the ``/files`` route is served from.
            signing_secret: Secret used to sign download tokens.
        """
        self._root = Path(root).resolve()
        self._public_base_url = public_base_url.rstrip("/")
        self._signing_secret = signing_secret

    def _resolve(self, path: str) -> Path:
        """Map a blob key to a file under the root, refusing escapes."""
        target = (self._root / path).resolve()
        if not path or not target.is_relative_to(self._root) or target == self._root:
            raise StorageError(f"Invalid blob path: {path}")
        return target

    def create_token(self, path: str, ttl_minutes: int) -> str:
        """Sign a download token for one blob."""
        now = datetime.now(timezone.utc)
        payload = {
            "type": TOKEN_TYPE,
            "path": path,
            "iat": now,
            "exp": now + timedelta(minutes=ttl_minutes),
        }
        return jwt.encode(payload, self._signing_secret, algorithm=TOKEN_ALGORITHM)

    def verify_token(self, token: str, path: str) -> bool:
        """Return whether ``token`` grants access to ``path`` right now."""
        try:
            payload = jwt.decode(token, self._signing_secret, algorithms=[TOKEN_ALGORITHM])
        except jwt.ExpiredSignatureError:
            logger.debug(f"Expired download token for {path}")
            return False
        except jwt.InvalidTokenError as e:
            logger.warning(f"Invalid download token for {path}: {e}")
            return False

        return payload.get("type") == TOKEN_TYPE and payload.get("path") == path

    async def upload(
        self,
        path: str,
        data: bytes,
        ttl_minutes: int,
        content_type: str = DOCX_MIME_TYPE,
    ) -> str:
        target = self._resolve(path)

        def _write() -> None:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)

        try:
            await asyncio.to_thread(_write)
        except OSError as e:
            logger.error(f"Failed to write blob {path}: {e}", exc_info=True)
            raise StorageError("Failed to store document") from e

        logger.info(f"Stored blob {path} ({len(data)} bytes, {content_type})")
        return await self.get_signed_url(path, ttl_minutes)

    async def get_signed_url(self, path: str, ttl_minutes: int) -> str:
        self._resolve(path)
        try:
            token = self.create_token(path, ttl_minutes)
        except jwt.PyJWTError as e:
            logger.error(f"Failed to sign URL for {path}: {e}", exc_info=True)
            raise StorageError("Failed to sign download URL") from e
        return f"{self._public_base_url}/files/{quote(path)}?token={token}"

    async def download(self, path: str) -> bytes:
        target = self._resolve(path)
        try:
            return await asyncio.to_thread(target.read_bytes)
        except OSError as e:
            logger.error(f"Failed to read blob {path}: {e}")
            raise StorageError(f"Blob not readable: {path}") from e
