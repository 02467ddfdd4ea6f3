import logging
import time
import uuid
from collections.abc import Sequence
from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from photoshelf.models.gallery import Gallery, Image
from photoshelf.repositories.base_repository import BaseRepository
from photoshelf.schemas.upload import StoredImage

logger = logging.getLogger(__name__)


class GalleryRepository(BaseRepository):
    def create_gallery(self, owner_id: uuid.UUID, name: str, description: str | None = None) -> Gallery:
        gallery = Gallery(id=uuid.uuid4(), owner_id=owner_id, name=name, description=description)
        self.db.add(gallery)
        self.db.commit()
        self.db.refresh(gallery)
        return gallery

    def get_gallery_by_id_and_owner(self, gallery_id: uuid.UUID, owner_id: uuid.UUID) -> Gallery | None:
        stmt = select(Gallery).where(Gallery.id == gallery_id, Gallery.owner_id == owner_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def get_images_by_gallery_id(self, gallery_id: uuid.UUID) -> list[Image]:
        stmt = select(Image).where(Image.gallery_id == gallery_id).order_by(Image.uploaded_at.asc(), Image.original_filename.asc())
        return list(self.db.execute(stmt).scalars().all())

    def get_image_by_id_and_owner(self, image_id: uuid.UUID, owner_id: uuid.UUID) -> Image | None:
        stmt = select(Image).join(Image.gallery).where(Image.id == image_id, Gallery.owner_id == owner_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def create_images_batch(self, gallery_id: uuid.UUID, images: Sequence[StoredImage]) -> list[Image]:
        """Insert the metadata rows of a committed upload batch in one transaction.

        Rows keep the order of ``images``. On a database error the transaction is rolled
        back and the error propagates; the caller owns the stored files.
        """
        start_time = time.time()
        now = datetime.now(UTC)
        rows = [
            Image(
                id=uuid.uuid4(),
                gallery_id=gallery_id,
                filename=image.storage_key,
                thumbnail_filename=image.thumbnail_storage_key,
                original_filename=image.original_filename,
                mime_type=image.mime_type,
                file_size=image.byte_size,
                width=image.width,
                height=image.height,
                uploaded_at=now,
            )
            for image in images
        ]

        gallery = self.db.get(Gallery, gallery_id)
        if gallery is not None:
            gallery.updated_at = now
        self.db.add_all(rows)
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise

        logger.info(f"Inserted {len(rows)} image rows in {time.time() - start_time:.3f}s")
        return rows

    def delete_image(self, image: Image) -> None:
        self.db.delete(image)
        self.db.commit()
