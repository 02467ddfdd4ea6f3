import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile, status
from sqlalchemy.exc import SQLAlchemyError
from starlette.concurrency import run_in_threadpool

from photoshelf.auth_utils import get_current_user
from photoshelf.dependencies import get_batch_uploader, get_gallery_repository, get_upload_settings
from photoshelf.errors import error_response
from photoshelf.logger import logger as event_logger
from photoshelf.repositories.gallery_repository import GalleryRepository
from photoshelf.request_context import get_request_id
from photoshelf.schemas.image import UploadConfigResponse, UploadedImage, UploadResponse
from photoshelf.schemas.upload import FailureKind, UploadCandidate
from photoshelf.upload.config import UploadSettings
from photoshelf.upload.coordinator import BatchUploadCoordinator

logger = logging.getLogger(__name__)

router = APIRouter(tags=["uploads"])

FAILURE_STATUS = {
    FailureKind.INVALID: 400,
    FailureKind.UNPROCESSABLE: 422,
    FailureKind.STORAGE: 500,
}


async def read_upload_candidate(file: UploadFile) -> UploadCandidate:
    """Read one multipart part into memory, recording read failures as a transport error."""
    filename = file.filename or "unknown"
    try:
        data = await file.read()
    except OSError as e:
        logger.warning(f"Failed to read uploaded part {filename!r}: {e}")
        return UploadCandidate(filename=filename, content_type=file.content_type, size=0, error=str(e) or "read failed")
    finally:
        await file.close()
    return UploadCandidate(filename=filename, content_type=file.content_type, size=len(data), data=data)


@router.post("/galleries/{gallery_id}/images", status_code=status.HTTP_201_CREATED, response_model=UploadResponse)
async def upload_images(
    request: Request,
    gallery_id: UUID,
    files: Annotated[list[UploadFile] | None, File()] = None,
    repo: GalleryRepository = Depends(get_gallery_repository),
    uploader: BatchUploadCoordinator = Depends(get_batch_uploader),
    current_user=Depends(get_current_user),
):
    """Upload a batch of images into a gallery. Either every file is stored or none is."""
    request_id = get_request_id(request)

    gallery = repo.get_gallery_by_id_and_owner(gallery_id, current_user.id)
    if not gallery:
        raise HTTPException(status_code=404, detail="Gallery not found")

    candidates = [await read_upload_candidate(file) for file in files or []]

    # codec work is synchronous, keep it off the event loop
    result = await run_in_threadpool(uploader.upload_batch, candidates, request_id)
    if not result.success:
        kind = result.failure_kind or FailureKind.STORAGE
        return error_response(request, FAILURE_STATUS[kind], "Upload failed", details="; ".join(result.errors))

    try:
        rows = repo.create_images_batch(gallery.id, result.committed)
    except SQLAlchemyError:
        logger.exception(f"Failed to save metadata for {len(result.committed)} images (request_id={request_id})")
        await run_in_threadpool(uploader.rollback, result.committed)
        return error_response(request, 500, "Failed to save image metadata")

    event_logger.log_event(
        "images_uploaded",
        request_id=request_id,
        user_id=current_user.id,
        gallery_id=gallery.id,
        image_ids=[row.id for row in rows],
    )
    return UploadResponse(uploaded=[UploadedImage.model_validate(row) for row in rows])


@router.get("/upload-config", response_model=UploadConfigResponse)
def get_upload_config(settings: UploadSettings = Depends(get_upload_settings)) -> UploadConfigResponse:
    """Active upload limits, so clients can pre-validate before sending."""
    return UploadConfigResponse(
        max_file_size=settings.max_file_size,
        max_batch_files=settings.max_batch_files,
        max_batch_size=settings.max_batch_size,
        allowed_types=settings.allowed_types,
        thumbnail_max_size=settings.thumbnail_max_size,
    )
