import io

from PIL import Image, UnidentifiedImageError

from photoshelf.schemas.upload import BatchValidationResult, UploadCandidate, ValidationResult
from photoshelf.upload.config import UploadSettings, format_megabytes


# Pillow reports multi-picture JPEGs (most phone cameras) as MPO
_FORMAT_MIME_TYPES = {
    "JPEG": "image/jpeg",
    "MPO": "image/jpeg",
    "PNG": "image/png",
    "GIF": "image/gif",
    "WEBP": "image/webp",
}


def sniff_mime_type(data: bytes) -> str | None:
    """Detect the content type from the file header, ignoring anything the client claimed.

    Returns None for bytes Pillow cannot identify as an image. Images whose pixel count
    exceeds Pillow's decompression bomb limit raise ``Image.DecompressionBombError``.
    """
    if not data:
        return None
    try:
        with Image.open(io.BytesIO(data)) as image:
            image_format = image.format
    except (UnidentifiedImageError, OSError, ValueError, SyntaxError):
        return None
    if image_format is None:
        return None
    return _FORMAT_MIME_TYPES.get(image_format) or Image.MIME.get(image_format)


class Validator:
    """Checks a single uploaded file. Has no side effects."""

    def __init__(self, settings: UploadSettings):
        self.settings = settings

    def validate(self, candidate: UploadCandidate) -> ValidationResult:
        if candidate.error:
            return ValidationResult(valid=False, errors=[f"File upload error: {candidate.error}"])

        errors: list[str] = []
        if candidate.size > self.settings.max_file_size:
            errors.append(f"File size exceeds maximum limit of {format_megabytes(self.settings.max_file_size)}")

        try:
            mime_type = sniff_mime_type(candidate.data)
        except Image.DecompressionBombError:
            errors.append("Image dimensions exceed maximum limit")
            return ValidationResult(valid=False, errors=errors)

        allowed_extensions = self.settings.allowed_types.get(mime_type) if mime_type else None
        if allowed_extensions is None:
            errors.append(f"File type not allowed. Allowed types: {self.settings.allowed_type_labels}")
            return ValidationResult(valid=False, errors=errors)

        extension = candidate.extension
        if extension not in allowed_extensions:
            errors.append("File extension does not match file type")

        return ValidationResult(valid=not errors, mime_type=mime_type, extension=extension, errors=errors)


class BatchValidator:
    """Checks aggregate limits of a batch before any file is processed."""

    def __init__(self, settings: UploadSettings):
        self.settings = settings

    def validate_batch(self, candidates: list[UploadCandidate]) -> BatchValidationResult:
        if not candidates:
            return BatchValidationResult(valid=False, errors=["No files provided"])

        if len(candidates) > self.settings.max_batch_files:
            return BatchValidationResult(
                valid=False,
                errors=[f"Too many files. Maximum {self.settings.max_batch_files} files allowed per upload"],
            )

        total_size = sum(candidate.size for candidate in candidates)
        errors = []
        if total_size > self.settings.max_batch_size:
            errors.append(f"Total batch size exceeds maximum limit of {format_megabytes(self.settings.max_batch_size)}")

        return BatchValidationResult(valid=not errors, errors=errors, total_size=total_size)
