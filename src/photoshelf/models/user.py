import uuid
from datetime import UTC, datetime

from sqlalchemy import DateTime, String, Uuid
from sqlalchemy.orm import mapped_column, relationship

from photoshelf.models.db import Base


class User(Base):
    __tablename__ = "users"

    id = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    email = mapped_column(String(255), unique=True, nullable=False, index=True)
    created_at = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False)

    galleries = relationship("Gallery", back_populates="owner", passive_deletes=True)
