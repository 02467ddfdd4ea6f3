from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class UploadedImage(BaseModel):
    id: UUID
    filename: str
    thumbnail_filename: str
    original_filename: str
    file_size: int
    width: int
    height: int

    model_config = ConfigDict(from_attributes=True)


class UploadResponse(BaseModel):
    uploaded: list[UploadedImage]


class ImageResponse(BaseModel):
    id: UUID
    gallery_id: UUID
    filename: str
    thumbnail_filename: str
    original_filename: str
    mime_type: str
    file_size: int
    width: int
    height: int
    uploaded_at: datetime
    url: str
    thumbnail_url: str

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_db_image(cls, image) -> "ImageResponse":
        """Build the response for an Image row, pointing both URLs at the file route."""
        return cls(
            id=image.id,
            gallery_id=image.gallery_id,
            filename=image.filename,
            thumbnail_filename=image.thumbnail_filename,
            original_filename=image.original_filename,
            mime_type=image.mime_type,
            file_size=image.file_size,
            width=image.width,
            height=image.height,
            uploaded_at=image.uploaded_at,
            url=f"/uploads/{image.filename}",
            thumbnail_url=f"/uploads/{image.thumbnail_filename}",
        )


class UploadConfigResponse(BaseModel):
    max_file_size: int
    max_batch_files: int
    max_batch_size: int
    allowed_types: dict[str, list[str]]
    thumbnail_max_size: int
