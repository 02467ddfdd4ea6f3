# Models package

from .db import Base
from .gallery import Gallery, Image
from .user import User

__all__ = ["Base", "Gallery", "Image", "User"]
