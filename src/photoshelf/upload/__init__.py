# Batch image upload pipeline

from .config import UploadSettings
from .coordinator import BatchUploadCoordinator
from .processor import FileProcessor
from .storage import LocalStorage
from .thumbnails import ThumbnailGenerator
from .validation import BatchValidator, Validator

__all__ = [
    "BatchUploadCoordinator",
    "BatchValidator",
    "FileProcessor",
    "LocalStorage",
    "ThumbnailGenerator",
    "UploadSettings",
    "Validator",
]
