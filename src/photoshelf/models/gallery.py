import uuid
from datetime import UTC, datetime

from sqlalchemy import BigInteger, DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import mapped_column, relationship

from photoshelf.models.db import Base


class Gallery(Base):
    __tablename__ = "galleries"

    id = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    owner_id = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = mapped_column(String(255), nullable=False, default="")
    description = mapped_column(Text, nullable=True)
    created_at = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False)
    updated_at = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(UTC), onupdate=lambda: datetime.now(UTC), nullable=False)

    owner = relationship("User", back_populates="galleries")
    images = relationship("Image", back_populates="gallery", passive_deletes=True)


class Image(Base):
    __tablename__ = "images"

    id = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    gallery_id = mapped_column(Uuid, ForeignKey("galleries.id", ondelete="CASCADE"), nullable=False, index=True)
    # flat storage keys, see photoshelf.upload.storage
    filename = mapped_column(String(255), unique=True, nullable=False)
    thumbnail_filename = mapped_column(String(255), nullable=False)
    original_filename = mapped_column(String(255), nullable=False)
    mime_type = mapped_column(String(64), nullable=False)
    file_size = mapped_column(BigInteger, nullable=False)
    width = mapped_column(Integer, nullable=False)
    height = mapped_column(Integer, nullable=False)
    uploaded_at = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False)

    gallery = relationship(Gallery, back_populates="images")
