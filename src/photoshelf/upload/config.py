from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

MIB = 1024 * 1024

DEFAULT_ALLOWED_TYPES: dict[str, list[str]] = {
    "image/jpeg": ["jpg", "jpeg"],
    "image/png": ["png"],
    "image/gif": ["gif"],
    "image/webp": ["webp"],
}


class UploadSettings(BaseSettings):
    """Limits and codec settings for the image upload pipeline.

    Every value can be overridden with an ``UPLOAD_`` prefixed environment variable,
    e.g. ``UPLOAD_MAX_FILE_SIZE=5242880`` or
    ``UPLOAD_ALLOWED_TYPES='{"image/png": ["png"]}'``.
    """

    storage_dir: Path = Path("uploads")
    max_file_size: int = Field(default=10 * MIB, ge=1)
    max_batch_files: int = Field(default=20, ge=1)
    max_batch_size: int = Field(default=200 * MIB, ge=1)
    allowed_types: dict[str, list[str]] = Field(default_factory=lambda: {mime: list(exts) for mime, exts in DEFAULT_ALLOWED_TYPES.items()})

    thumbnail_max_size: int = Field(default=300, ge=1)
    thumbnail_allow_upscale: bool = True
    thumbnail_prefix: str = "thumb_"
    jpeg_quality: int = Field(default=85, ge=1, le=100)
    webp_quality: int = Field(default=85, ge=0, le=100)
    png_compress_level: int = Field(default=8, ge=0, le=9)

    model_config = SettingsConfigDict(env_prefix="UPLOAD_", env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @field_validator("allowed_types")
    @classmethod
    def normalize_allowed_types(cls, value: dict[str, list[str]]) -> dict[str, list[str]]:
        return {mime.strip().lower(): [ext.strip().lower().lstrip(".") for ext in exts] for mime, exts in value.items()}

    @property
    def allowed_type_labels(self) -> str:
        """Human readable list of allowed types, e.g. ``JPEG, PNG, GIF, WEBP``."""
        return ", ".join(mime.split("/", 1)[-1].upper() for mime in self.allowed_types)


def format_megabytes(size: int) -> str:
    return f"{size / MIB:g}MB"


__all__ = ["DEFAULT_ALLOWED_TYPES", "MIB", "UploadSettings", "format_megabytes"]
