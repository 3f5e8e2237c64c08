"""Signed downloads for the local blob store.

Only mounted when ``BLOB_STORE_TYPE=local``; S3 URLs point at the bucket.
"""

import logging
from pathlib import PurePosixPath

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import Response

from draftgen.api.deps import get_factory
from draftgen.core.exceptions import StorageError
from draftgen.core.factory import ComponentFactory
from draftgen.interfaces.template import DOCX_MIME_TYPE
from draftgen.strategies.storage import LocalBlobStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/files", tags=["files"])


@router.get("/{path:path}")
async def download_file(
    path: str,
    token: str = Query(default="", description="Signed download token"),
    factory: ComponentFactory = Depends(get_factory),
) -> Response:
    """Serve a stored blob when ``token`` grants access to it.

    Raises:
        HTTPException: 403 for a missing, invalid or expired token; 404 when
            the blob does not exist.
    """
    store = factory.get_blob_store()
    if not isinstance(store, LocalBlobStore):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")

    if not token or not store.verify_token(token, path):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid or expired link")

    try:
        content = await store.download(path)
    except StorageError as e:
        logger.warning(f"Signed download of missing blob {path}: {e}")
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found") from e

    filename = PurePosixPath(path).name
    return Response(
        content=content,
        media_type=DOCX_MIME_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
