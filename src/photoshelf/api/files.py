import logging
import mimetypes

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import FileResponse

from photoshelf.dependencies import get_storage
from photoshelf.upload.storage import LocalStorage, StorageKeyError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/uploads", tags=["files"])


@router.get("/{filename}")
def serve_file(filename: str, storage: LocalStorage = Depends(get_storage)) -> FileResponse:
    """Serve a stored original or thumbnail from the flat upload directory."""
    try:
        path = storage.path(filename)
    except StorageKeyError:
        raise HTTPException(status_code=404, detail="File not found") from None

    if not path.is_file():
        logger.info(f"Requested file {filename} does not exist")
        raise HTTPException(status_code=404, detail="File not found")

    mime_type, _ = mimetypes.guess_type(filename)
    return FileResponse(path, media_type=mime_type or "application/octet-stream")
