import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Response, status

from photoshelf.auth_utils import get_current_user
from photoshelf.dependencies import get_gallery_repository, get_storage
from photoshelf.repositories.gallery_repository import GalleryRepository
from photoshelf.schemas.image import ImageResponse
from photoshelf.upload.storage import LocalStorage

logger = logging.getLogger(__name__)

router = APIRouter(tags=["images"])


@router.get("/galleries/{gallery_id}/images", response_model=list[ImageResponse])
def list_gallery_images(
    gallery_id: UUID,
    repo: GalleryRepository = Depends(get_gallery_repository),
    current_user=Depends(get_current_user),
) -> list[ImageResponse]:
    gallery = repo.get_gallery_by_id_and_owner(gallery_id, current_user.id)
    if not gallery:
        raise HTTPException(status_code=404, detail="Gallery not found")
    return [ImageResponse.from_db_image(image) for image in repo.get_images_by_gallery_id(gallery_id)]


@router.delete("/images/{image_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_image(
    image_id: UUID,
    repo: GalleryRepository = Depends(get_gallery_repository),
    storage: LocalStorage = Depends(get_storage),
    current_user=Depends(get_current_user),
):
    """Delete an image's original, its thumbnail, and then its metadata row."""
    image = repo.get_image_by_id_and_owner(image_id, current_user.id)
    if not image:
        raise HTTPException(status_code=404, detail="Image not found")

    # a missing file does not block removing the row
    for key in (image.filename, image.thumbnail_filename):
        if not storage.delete(key):
            logger.warning(f"Stored file {key} of image {image_id} was already gone")

    repo.delete_image(image)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
