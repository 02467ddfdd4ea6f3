import logging

from PIL import Image, UnidentifiedImageError

from photoshelf.schemas.upload import FailureKind, FileOutcome, StoredImage, ThumbnailResult, UploadCandidate
from photoshelf.upload.config import UploadSettings
from photoshelf.upload.storage import LocalStorage, generate_storage_key, generate_thumbnail_key
from photoshelf.upload.thumbnails import ThumbnailGenerator
from photoshelf.upload.validation import Validator

logger = logging.getLogger(__name__)

KEY_ATTEMPTS = 5


class FileProcessor:
    """Validates one file, stores it, and stores its thumbnail.

    A failed call leaves nothing of that file on storage.
    """

    def __init__(
        self,
        settings: UploadSettings,
        storage: LocalStorage,
        validator: Validator | None = None,
        thumbnails: ThumbnailGenerator | None = None,
    ):
        self.settings = settings
        self.storage = storage
        self.validator = validator or Validator(settings)
        self.thumbnails = thumbnails or ThumbnailGenerator(settings)

    def process(self, candidate: UploadCandidate) -> FileOutcome:
        validation = self.validator.validate(candidate)
        if not validation.valid or validation.mime_type is None or validation.extension is None:
            return FileOutcome.failed(validation.errors, FailureKind.INVALID)

        try:
            storage_key = self._save_original(candidate.data, validation.extension)
        except OSError as e:
            logger.error(f"Failed to save uploaded file {candidate.filename!r}: {e}")
            return FileOutcome.failed(["Failed to save uploaded file"], FailureKind.STORAGE)

        try:
            return self._store_derivatives(candidate, validation.mime_type, storage_key)
        except Exception:
            # the original is ours from here on, as is a thumbnail under its derived key
            self.storage.delete(storage_key)
            self.storage.delete(generate_thumbnail_key(storage_key, self.settings.thumbnail_prefix))
            raise

    def _store_derivatives(self, candidate: UploadCandidate, mime_type: str, storage_key: str) -> FileOutcome:
        dimensions = self._read_dimensions(storage_key)
        if dimensions is None:
            self.storage.delete(storage_key)
            return FileOutcome.failed(["Failed to read image dimensions"], FailureKind.UNPROCESSABLE)

        try:
            thumbnail = self.thumbnails.generate(self.storage.path(storage_key), mime_type)
        except Exception as e:
            logger.exception(f"Thumbnail generator raised for {candidate.filename!r}")
            thumbnail = ThumbnailResult.failed(str(e))
        if not thumbnail.success or thumbnail.data is None:
            logger.warning(f"Thumbnail generation failed for {candidate.filename!r}: {thumbnail.error}")
            self.storage.delete(storage_key)
            return FileOutcome.failed(["Failed to create thumbnail"], FailureKind.UNPROCESSABLE)

        thumbnail_key = generate_thumbnail_key(storage_key, self.settings.thumbnail_prefix)
        try:
            self.storage.save(thumbnail_key, thumbnail.data)
        except OSError as e:
            # save() removes its own partial write; an existing file under the key is not ours
            logger.error(f"Failed to save thumbnail {thumbnail_key}: {e}")
            self.storage.delete(storage_key)
            return FileOutcome.failed(["Failed to save thumbnail"], FailureKind.STORAGE)

        width, height = dimensions
        image = StoredImage(
            storage_key=storage_key,
            thumbnail_storage_key=thumbnail_key,
            original_filename=candidate.filename,
            byte_size=candidate.size,
            width=width,
            height=height,
            mime_type=mime_type,
        )
        return FileOutcome(success=True, image=image)

    def _save_original(self, data: bytes, extension: str) -> str:
        """Store the original under a fresh key, retrying on collisions."""
        for attempt in range(1, KEY_ATTEMPTS + 1):
            storage_key = generate_storage_key(extension)
            if self.storage.exists(generate_thumbnail_key(storage_key, self.settings.thumbnail_prefix)):
                continue
            try:
                self.storage.save(storage_key, data)
            except FileExistsError:
                logger.warning(f"Storage key collision on {storage_key} (attempt {attempt}/{KEY_ATTEMPTS})")
                continue
            return storage_key
        raise FileExistsError(f"No free storage key after {KEY_ATTEMPTS} attempts")

    def _read_dimensions(self, storage_key: str) -> tuple[int, int] | None:
        try:
            with Image.open(self.storage.path(storage_key)) as image:
                return image.size
        except (UnidentifiedImageError, OSError, ValueError, SyntaxError, Image.DecompressionBombError) as e:
            logger.warning(f"Failed to read image dimensions of {storage_key}: {e}")
            return None
