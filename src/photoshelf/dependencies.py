"""
Dependency injection for the upload pipeline.

Settings are read from the environment once per process. Storage and the coordinator are
cheap to build and are created per request from those settings, which lets tests swap the
settings with ``app.dependency_overrides[get_upload_settings]``.
"""

from functools import lru_cache

from fastapi import Depends
from sqlalchemy.orm import Session

from photoshelf.models.db import get_db
from photoshelf.repositories.gallery_repository import GalleryRepository
from photoshelf.upload.config import UploadSettings
from photoshelf.upload.coordinator import BatchUploadCoordinator
from photoshelf.upload.storage import LocalStorage


@lru_cache(maxsize=1)
def get_upload_settings() -> UploadSettings:
    return UploadSettings()


def get_storage(settings: UploadSettings = Depends(get_upload_settings)) -> LocalStorage:
    return LocalStorage(settings.storage_dir)


def get_batch_uploader(
    settings: UploadSettings = Depends(get_upload_settings),
    storage: LocalStorage = Depends(get_storage),
) -> BatchUploadCoordinator:
    return BatchUploadCoordinator(settings, storage)


def get_gallery_repository(db: Session = Depends(get_db)) -> GalleryRepository:
    return GalleryRepository(db)
