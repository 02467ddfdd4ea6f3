from enum import StrEnum
from pathlib import PurePath

from pydantic import BaseModel, Field


class FailureKind(StrEnum):
    """Why a file (and therefore its batch) was not committed."""

    INVALID = "invalid"  # rejected client input
    UNPROCESSABLE = "unprocessable"  # allowed type that does not decode or thumbnail
    STORAGE = "storage"  # write failure or unexpected environment error


class UploadCandidate(BaseModel):
    """A single file of an upload request, held in memory for that request only."""

    filename: str
    content_type: str | None = None
    size: int = Field(..., ge=0)
    data: bytes = Field(default=b"", repr=False)
    error: str | None = Field(default=None, description="Transport-level upload error, if any")

    @property
    def extension(self) -> str:
        return PurePath(self.filename).suffix.lstrip(".").lower()


class ValidationResult(BaseModel):
    valid: bool
    mime_type: str | None = None
    extension: str | None = None
    errors: list[str] = Field(default_factory=list)


class BatchValidationResult(BaseModel):
    valid: bool
    errors: list[str] = Field(default_factory=list)
    total_size: int = 0


class ThumbnailResult(BaseModel):
    """Encoded thumbnail bytes, or the reason none could be produced."""

    success: bool
    data: bytes | None = Field(default=None, repr=False)
    width: int | None = None
    height: int | None = None
    error: str | None = None

    @classmethod
    def failed(cls, error: str) -> "ThumbnailResult":
        return cls(success=False, error=error)


class StoredImage(BaseModel):
    """An original and its thumbnail, both written to storage."""

    storage_key: str
    thumbnail_storage_key: str
    original_filename: str
    byte_size: int
    width: int
    height: int
    mime_type: str


class FileOutcome(BaseModel):
    success: bool
    image: StoredImage | None = None
    errors: list[str] = Field(default_factory=list)
    failure_kind: FailureKind | None = None

    @classmethod
    def failed(cls, errors: list[str], kind: FailureKind) -> "FileOutcome":
        return cls(success=False, errors=errors, failure_kind=kind)


class BatchResult(BaseModel):
    """Result of a batch upload. On failure nothing from the batch remains on storage."""

    success: bool
    committed: list[StoredImage] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
    failed_filename: str | None = None
    failure_kind: FailureKind | None = None
