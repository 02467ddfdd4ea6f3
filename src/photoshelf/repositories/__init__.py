# Repositories package

from .base_repository import BaseRepository
from .gallery_repository import GalleryRepository
from .user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "GalleryRepository",
    "UserRepository",
]
