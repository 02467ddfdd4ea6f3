"""
All-or-nothing batch upload.

Files are processed strictly in input order. The first failing file stops the batch, and
every original and thumbnail already written by that batch is deleted again, so a failed
batch leaves storage exactly as it found it.
"""

import logging
import time
from collections.abc import Sequence

from photoshelf.logger import logger as event_logger
from photoshelf.schemas.upload import BatchResult, FailureKind, FileOutcome, StoredImage, UploadCandidate
from photoshelf.upload.config import UploadSettings
from photoshelf.upload.processor import FileProcessor
from photoshelf.upload.storage import LocalStorage
from photoshelf.upload.validation import BatchValidator

logger = logging.getLogger(__name__)


class BatchUploadCoordinator:
    def __init__(
        self,
        settings: UploadSettings,
        storage: LocalStorage,
        processor: FileProcessor | None = None,
        batch_validator: BatchValidator | None = None,
    ):
        self.settings = settings
        self.storage = storage
        self.processor = processor or FileProcessor(settings, storage)
        self.batch_validator = batch_validator or BatchValidator(settings)

    def upload_batch(self, candidates: Sequence[UploadCandidate], request_id: str | None = None) -> BatchResult:
        candidates = list(candidates)
        batch_validation = self.batch_validator.validate_batch(candidates)
        if not batch_validation.valid:
            event_logger.log_event(
                "upload_rejected",
                level=logging.WARNING,
                request_id=request_id,
                file_count=len(candidates),
                errors=batch_validation.errors,
            )
            return BatchResult(success=False, errors=batch_validation.errors, failure_kind=FailureKind.INVALID)

        start_time = time.time()
        committed: list[StoredImage] = []
        for candidate in candidates:
            outcome = self._process(candidate)
            if not outcome.success or outcome.image is None:
                removed = self.rollback(committed)
                errors = [f"{candidate.filename}: {error}" for error in outcome.errors]
                event_logger.log_event(
                    "upload_failed",
                    level=logging.WARNING,
                    request_id=request_id,
                    filename=candidate.filename,
                    failure_kind=outcome.failure_kind,
                    errors=errors,
                    rolled_back_files=removed,
                )
                return BatchResult(
                    success=False,
                    errors=errors,
                    failed_filename=candidate.filename,
                    failure_kind=outcome.failure_kind or FailureKind.STORAGE,
                )
            committed.append(outcome.image)

        event_logger.log_event(
            "upload_completed",
            request_id=request_id,
            file_count=len(committed),
            total_size=batch_validation.total_size,
            duration=round(time.time() - start_time, 3),
        )
        return BatchResult(success=True, committed=committed)

    def rollback(self, images: Sequence[StoredImage]) -> int:
        """Delete the originals and thumbnails of ``images``. Returns the number of files removed."""
        removed = 0
        for image in images:
            for key in (image.storage_key, image.thumbnail_storage_key):
                if self.storage.delete(key):
                    removed += 1
        if images:
            logger.warning(f"Batch upload failed, rolled back {len(images)} images ({removed} files)")
        return removed

    def _process(self, candidate: UploadCandidate) -> FileOutcome:
        try:
            return self.processor.process(candidate)
        except Exception:
            logger.exception(f"Unexpected error while processing {candidate.filename!r}")
            return FileOutcome.failed(["Unexpected error while processing file"], FailureKind.STORAGE)
